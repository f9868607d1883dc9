from __future__ import annotations
import re
from io import BytesIO

from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side

from .answer_key import mark_answers, resolve_display_text
from .models import Assignment, GradingResult, Submission

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

NO_ANSWER = "[Không trả lời]"
CORRECT_LABELS = {True: "ĐÚNG", False: "SAI", None: None}

_FONT_NAME = "Times New Roman"
_THIN = Side(style="thin")
_BORDER = Border(top=_THIN, left=_THIN, bottom=_THIN, right=_THIN)


def export_filename(submission: Submission) -> str:
    name = re.sub(r"\s+", "_", submission.student_name.strip())
    return f"Ket_Qua_{name}.xlsx"


def build_results_workbook(assignment: Assignment, submission: Submission, result: GradingResult) -> bytes:
    wb = Workbook()
    sheet = wb.active
    sheet.title = "Kết quả bài làm"

    sheet.merge_cells("A1:F1")
    sheet["A1"] = "BÁO CÁO KẾT QUẢ BÀI TẬP"
    sheet["A1"].font = Font(name=_FONT_NAME, size=16, bold=True)
    sheet["A1"].alignment = Alignment(horizontal="center")
    sheet.append([])

    header_rows = [
        ("Tên bài tập:", assignment.title),
        ("Học sinh:", submission.student_name),
        ("Lớp:", submission.student_class),
        ("Điểm số:", f"{result.score} / {result.total_score}"),
        ("Nhận xét chung:", result.overall_comment),
    ]
    for label, value in header_rows:
        sheet.append([label, value])
        sheet.cell(row=sheet.max_row, column=1).font = Font(name=_FONT_NAME, size=12, bold=True)
    # Score in blue
    sheet["A6"].font = Font(name=_FONT_NAME, size=12, bold=True, color="FF0000FF")
    sheet.append([])

    sheet.append(["STT", "Câu hỏi", "Trả lời của HS", "Đáp án tham khảo", "Đánh giá chi tiết", "Kết quả"])
    header_row = sheet.max_row
    sheet.row_dimensions[header_row].height = 25
    for cell in sheet[header_row]:
        cell.fill = PatternFill(fill_type="solid", fgColor="FF2563EB")
        cell.font = Font(name=_FONT_NAME, size=12, bold=True, color="FFFFFFFF")
        cell.alignment = Alignment(horizontal="center", vertical="center")
        cell.border = _BORDER

    for letter, width in zip("ABCDEF", (10, 50, 30, 30, 40, 12)):
        sheet.column_dimensions[letter].width = width

    marks = mark_answers(assignment, submission.answers)
    for number, q in enumerate(assignment.questions, start=1):
        student_answer = resolve_display_text(q, submission.answers.get(q.id)) or NO_ANSWER
        reference = resolve_display_text(q, q.correct_answer) or ""
        feedback = result.feedback.get(q.id, "")
        sheet.append([number, q.content, student_answer, reference, feedback, CORRECT_LABELS[marks[q.id]]])
        for cell in sheet[sheet.max_row]:
            cell.border = _BORDER
            cell.font = Font(name=_FONT_NAME, size=12)
            cell.alignment = Alignment(wrap_text=True, vertical="top")

    buffer = BytesIO()
    wb.save(buffer)
    return buffer.getvalue()


def results_summary_text(assignment: Assignment, submission: Submission, result: GradingResult) -> str:
    return (
        "Xin chào Giáo viên,\n\n"
        "Hệ thống xin gửi kết quả bài làm của học sinh:\n"
        f"- Họ tên: {submission.student_name}\n"
        f"- Lớp: {submission.student_class}\n"
        f"- Bài tập: {assignment.title}\n"
        f"- Điểm số: {result.score} / {result.total_score}\n\n"
        "Nhận xét chung:\n"
        f"{result.overall_comment}\n"
    )
