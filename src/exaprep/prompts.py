"""
Prompt Builder
- Input: difficulty, requested question types, number of questions
- Output: (instruction_text, output_schema) for one generation call

Pure: same input, same output. Each requested type label appears exactly
once in the instruction text, so the per-type rules below must not repeat
the labels themselves.
"""
from typing import Any, Dict, List, Sequence, Tuple
from langchain_core.prompts import PromptTemplate

from .configuration import settings
from .models import Difficulty, QuestionType

_TEMPLATE = (
    "You are ExaPrep AI, an expert exam creator. Your task is to create a high-quality practice exam "
    "based on the provided course material.\n\n"
    "Instructions:\n"
    "1. Analyze Material: Carefully examine the content of the file, identifying key concepts, vocabulary, "
    "the language of the document, and the overall subject matter.\n"
    "2. Language Matching: The generated exam, including the title and all questions, options, and answers, "
    "MUST be written in the same language as the original course material provided in the file.\n"
    "3. Generate Questions: Create a set of exactly {n} new questions based on the material, "
    "numbered sequentially from 1.\n"
    "4. Adhere to Configuration:\n"
    "   - Difficulty Level: {difficulty}. The complexity of questions and required knowledge should match this level.\n"
    "   - Question Types: The exam must include questions of the following types: {types}. "
    "Distribute them logically throughout the exam and set each question's questionType to one of these labels.\n"
    "5. Content Requirements:\n"
    "{type_rules}"
    "   - The correctAnswer field must be comprehensive and accurate for every question.\n"
    "6. Output Format: Provide the output strictly in the requested JSON format with the specified schema. "
    "Do not include any markdown formatting or code fences.\n"
)

_TYPE_RULES = {
    QuestionType.MCQ: (
        "   - For multiple-choice questions, provide exactly 4 distinct options with one clear correct answer; "
        "correctAnswer must be the full text of the correct option.\n"
    ),
    QuestionType.SHORT_ANSWER: (
        "   - For short-answer questions, require a concise, factual answer.\n"
    ),
    QuestionType.ESSAY: (
        "   - For essay questions, pose an open-ended prompt that requires a more detailed, structured response.\n"
    ),
}

_PROMPT = PromptTemplate.from_template(_TEMPLATE)


def output_schema() -> Dict[str, Any]:
    """Structured-output schema in the Gemini (OpenAPI subset) dialect."""
    return {
        "type": "OBJECT",
        "properties": {
            "title": {
                "type": "STRING",
                "description": "A creative and relevant title for the exam based on the provided material.",
            },
            "questions": {
                "type": "ARRAY",
                "description": "An array of exam questions.",
                "items": {
                    "type": "OBJECT",
                    "properties": {
                        "questionNumber": {
                            "type": "INTEGER",
                            "description": "The sequential number of the question.",
                        },
                        "questionText": {
                            "type": "STRING",
                            "description": "The full text of the question.",
                        },
                        "questionType": {
                            "type": "STRING",
                            "description": "The type of question. Must be one of: "
                            + ", ".join(f"'{t.value}'" for t in QuestionType) + ".",
                        },
                        "options": {
                            "type": "ARRAY",
                            "description": "An array of 4 string options for MCQ questions. "
                            "This field should be omitted for other question types.",
                            "items": {"type": "STRING"},
                        },
                        "correctAnswer": {
                            "type": "STRING",
                            "description": "The correct answer. For MCQs, this should be the full text of the correct option.",
                        },
                    },
                    "required": ["questionNumber", "questionText", "questionType", "correctAnswer"],
                },
            },
        },
        "required": ["title", "questions"],
    }


def build_prompt(
    difficulty: Difficulty,
    question_types: Sequence[QuestionType],
    number_of_questions: int,
) -> Tuple[str, Dict[str, Any]]:
    types: List[QuestionType] = list(dict.fromkeys(QuestionType(t) for t in question_types))
    if not types:
        raise ValueError("At least one question type is required.")
    if not settings.min_questions <= number_of_questions <= settings.max_questions:
        raise ValueError(
            f"number_of_questions must be between {settings.min_questions} and {settings.max_questions}, "
            f"got {number_of_questions}."
        )

    text = _PROMPT.format(
        n=number_of_questions,
        difficulty=Difficulty(difficulty).value,
        types=", ".join(t.value for t in types),
        type_rules="".join(_TYPE_RULES[t] for t in types),
    )
    return text, output_schema()
