"""Prompt construction for question generation and curriculum lookup."""

from __future__ import annotations
import logging
from typing import Any, Dict, List, Optional, Sequence

from .errors import EmptyConfiguration, GenerationFailed
from .models import FALSE_TOKEN, TRUE_TOKEN, Chapter, GenerationConfig, Question, QuestionType
from .responses import extract_json_object, parse_chapters, parse_questions
from .settings import Settings, settings as default_settings

logger = logging.getLogger(__name__)

DEFAULT_TOPIC = "Tổng hợp"

QUESTION_SCHEMA: Dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "questions": {
            "type": "ARRAY",
            "items": {
                "type": "OBJECT",
                "properties": {
                    "id": {"type": "STRING"},
                    "type": {"type": "STRING", "enum": [t.value for t in QuestionType]},
                    "content": {
                        "type": "STRING",
                        "description": "Question text. Use LaTeX $..$ for inline math and $$..$$ for block math.",
                    },
                    "options": {
                        "type": "ARRAY",
                        "items": {"type": "STRING"},
                        "description": "4 options for MCQ, or empty for others.",
                    },
                    "correctAnswer": {"type": "STRING", "description": "The correct answer key or text."},
                    "imageSvg": {
                        "type": "STRING",
                        "description": "Optional SVG code string for geometry/diagrams if needed. Ensure valid SVG XML.",
                    },
                },
                "required": ["id", "type", "content", "correctAnswer"],
            },
        }
    },
}

CHAPTER_SCHEMA: Dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "chapters": {
            "type": "ARRAY",
            "items": {
                "type": "OBJECT",
                "properties": {
                    "title": {"type": "STRING", "description": "Name of the Chapter/Topic"},
                    "lessons": {
                        "type": "ARRAY",
                        "items": {"type": "STRING"},
                        "description": "List of lesson names in this chapter",
                    },
                },
                "required": ["title", "lessons"],
            },
        }
    },
}


def active_configs(configs: Sequence[GenerationConfig]) -> List[GenerationConfig]:
    active = [c for c in configs if c.count > 0]
    if not active:
        raise EmptyConfiguration("Select at least one question type with a count greater than 0")
    return active


def generation_topic(manual_topic: str = "", chapter: str = "", lesson: str = "") -> str:
    if chapter or lesson:
        return f"Chương: {chapter}" + (f" - Bài: {lesson}" if lesson else "")
    return manual_topic.strip()


def assignment_topic(manual_topic: str = "", chapter: str = "", lesson: str = "") -> str:
    return lesson.strip() or chapter.strip() or manual_topic.strip() or DEFAULT_TOPIC


def _context_block(subject: str, grade: str, topic: str, material: Optional[str], limit: int) -> str:
    if material:
        return (
            "=== SOURCE MATERIAL (NỘI DUNG KIẾN THỨC) START ===\n"
            f"{material[:limit]}\n"
            "=== SOURCE MATERIAL END ===\n\n"
            "INSTRUCTION FOR SOURCE MATERIAL:\n"
            "The user has provided a textbook/document content above.\n"
            f'You MUST focus EXCLUSIVELY on the content related to the specific topic: "{topic}".\n'
            f'Step 1: Locate the section, chapter, or lesson titled "{topic}" within the Source Material.\n'
            "Step 2: Extract definitions, formulas, examples, and knowledge ONLY from that specific section.\n"
            "Step 3: Generate questions based strictly on that extracted knowledge.\n"
            "DO NOT generate questions from other chapters or outside knowledge unless necessary for context."
        )
    return (
        f"No source file provided. Generate questions based on the standard curriculum for Grade {grade} "
        f'{subject}, specifically for the topic: "{topic}".'
    )


def build_generation_prompt(
    subject: str,
    grade: str,
    topic: str,
    configs: Sequence[GenerationConfig],
    material: Optional[str] = None,
    *,
    context_limit: int = 50000,
) -> str:
    total = sum(c.count for c in configs)
    structure = "\n".join(f"- {c.count} câu hỏi loại '{c.type.value}' với độ khó '{c.difficulty}'" for c in configs)
    return (
        "Role: You are an expert Vietnamese teacher creating a test.\n"
        f"Task: Create a homework assignment for Grade {grade} {subject}.\n"
        f'Target Topic: "{topic}".\n\n'
        f"{_context_block(subject, grade, topic, material, context_limit)}\n\n"
        "ASSIGNMENT STRUCTURE:\n"
        f"Generate exactly {total} questions in total.\n\n"
        "Follow this config:\n"
        f"{structure}\n\n"
        "REQUIRED QUESTION TYPES:\n"
        "You must ONLY generate questions matching the types specified in the config.\n\n"
        "CRITICAL OUTPUT RULES:\n"
        "1. OUTPUT RAW JSON ONLY. NO PREAMBLE. NO EXPLANATION. NO MARKDOWN.\n"
        "2. MATHEMATICS: Use standard LaTeX format for all math formulas (e.g., $x^2 + y^2 = z^2$).\n"
        "3. GEOMETRY: If the question involves geometry, you MUST generate a simple, accurate SVG code string in the 'imageSvg' field.\n"
        "4. LANGUAGE: Vietnamese (Tiếng Việt).\n"
        "5. MCQ: Must have exactly 4 options (A, B, C, D text); correctAnswer is the letter.\n"
        f"6. TRUE_FALSE: correctAnswer is exactly '{TRUE_TOKEN}' or '{FALSE_TOKEN}'.\n"
        "7. CORRECTNESS: Ensure all answers are 100% correct and align with the Source Material."
    )


async def generate_questions(
    client,
    subject: str,
    grade: str,
    topic: str,
    configs: Sequence[GenerationConfig],
    material: Optional[str] = None,
    *,
    config: Optional[Settings] = None,
) -> List[Question]:
    config = config or default_settings
    configs = active_configs(configs)
    prompt = build_generation_prompt(
        subject, grade, topic, configs, material, context_limit=config.context_char_limit
    )
    try:
        raw = await client.generate_json(prompt, QUESTION_SCHEMA, temperature=0.3)
        questions = parse_questions(extract_json_object(raw))
    except Exception as err:
        logger.exception("Question generation failed (%s, grade %s)", subject, grade)
        raise GenerationFailed("Failed to generate questions via AI. Please check input files.") from err
    if not questions:
        raise GenerationFailed("The AI response did not contain any usable questions.")
    logger.info("Generated %d questions for %s grade %s", len(questions), subject, grade)
    return questions


async def parse_uploaded_content(client, raw_text: str) -> List[Question]:
    if not raw_text or not raw_text.strip():
        raise EmptyConfiguration("No homework text to analyse")
    prompt = (
        "Analyze the following text which contains homework questions.\n"
        "Convert them into the structured JSON format provided in the schema.\n"
        "Detect the question type automatically.\n"
        "Preserve all Math LaTeX.\n"
        "If it's a geometry question describing a shape, try to generate a representative SVG in 'imageSvg'.\n"
        "Language: Vietnamese.\n\n"
        f"Text to process:\n{raw_text}"
    )
    try:
        raw = await client.generate_json(prompt, QUESTION_SCHEMA)
        questions = parse_questions(extract_json_object(raw))
    except Exception as err:
        logger.exception("Parsing uploaded homework failed")
        raise GenerationFailed("Failed to analyse the uploaded content.") from err
    if not questions:
        raise GenerationFailed("No questions were found in the uploaded content.")
    return questions


async def analyze_curriculum(client, material: str, *, config: Optional[Settings] = None) -> List[Chapter]:
    config = config or default_settings
    prompt = (
        "Analyze the provided educational material (textbook/curriculum).\n"
        "Extract the structure of the content.\n"
        "Return a list of Chapters (or Topics/Units) and the list of specific Lessons within each Chapter.\n"
        "Language: Vietnamese.\n\n"
        "Format:\n"
        '- Determine the main "Chapters" or "Topics".\n'
        '- Under each, list the "Lessons" or "Sections".\n\n'
        f"Material Content:\n{material[:config.curriculum_char_limit]}"
    )
    try:
        raw = await client.generate_json(prompt, CHAPTER_SCHEMA)
        return parse_chapters(extract_json_object(raw))
    except Exception:
        # Caller falls back to a manually typed topic
        logger.exception("Curriculum analysis failed")
        return []


async def standard_curriculum(client, subject: str, grade: str, book_series: str) -> List[Chapter]:
    prompt = (
        "Bạn là một chuyên gia về chương trình giáo dục phổ thông mới của Việt Nam (GDPT 2018).\n\n"
        "Nhiệm vụ: Tạo danh sách cấu trúc chương trình học (Mục lục) cho:\n"
        f"- Môn học: {subject}\n"
        f"- Lớp: {grade}\n"
        f"- Bộ sách giáo khoa: {book_series}\n\n"
        "YÊU CẦU QUAN TRỌNG:\n"
        f'1. Hãy cố gắng trích xuất mục lục chính xác của cuốn sách giáo khoa "{book_series}" nếu bạn có dữ liệu.\n'
        "2. NẾU KHÔNG CÓ DỮ LIỆU CHÍNH XÁC TUYỆT ĐỐI VỀ BỘ SÁCH NÀY, HÃY SỬ DỤNG CHƯƠNG TRÌNH KHUNG CHUẨN "
        f"CỦA BỘ GIÁO DỤC (GDPT 2018) cho môn {subject} lớp {grade}.\n"
        "3. Mục tiêu là PHẢI TRẢ VỀ một danh sách các Chương và Bài học hợp lý để giáo viên chọn, "
        "không được trả về danh sách rỗng.\n\n"
        "Language: Vietnamese (Tiếng Việt)."
    )
    try:
        raw = await client.generate_json(prompt, CHAPTER_SCHEMA, temperature=0.4)
        return parse_chapters(extract_json_object(raw))
    except Exception:
        logger.exception("Standard curriculum lookup failed (%s, grade %s)", subject, grade)
        return []
