from io import BytesIO

import pytest
from docx import Document
from openpyxl import load_workbook
from pypdf import PdfWriter

from conftest import make_assignment
from smarthomework.documents import extract_text
from smarthomework.errors import FileReadFailed
from smarthomework.export import NO_ANSWER, build_results_workbook, export_filename, results_summary_text
from smarthomework.models import GradingResult, Submission


def _docx_bytes():
    doc = Document()
    doc.add_paragraph("Câu 1: Tính $2 + 2$.")
    doc.add_paragraph("   ")
    table = doc.add_table(rows=1, cols=1)
    table.cell(0, 0).text = "Câu 2: Giải phương trình."
    buffer = BytesIO()
    doc.save(buffer)
    return buffer.getvalue()


def test_extract_docx_paragraphs_and_tables():
    text = extract_text("de_thi.DOCX", _docx_bytes())
    assert text.splitlines() == ["Câu 1: Tính $2 + 2$.", "Câu 2: Giải phương trình."]


def test_extract_pdf_pages():
    writer = PdfWriter()
    writer.add_blank_page(width=200, height=200)
    writer.add_blank_page(width=200, height=200)
    buffer = BytesIO()
    writer.write(buffer)
    text = extract_text("sach.pdf", buffer.getvalue())
    assert "--- Page 1 ---" in text
    assert "--- Page 2 ---" in text


def test_extract_plain_text():
    assert extract_text("notes.txt", b"\xef\xbb\xbf" + "xin chào".encode("utf-8")) == "xin chào"


@pytest.mark.parametrize("name, content", [("broken.docx", b"not a zip"), ("broken.pdf", b"garbage"), ("x.txt", b"\xff\xfe\xfa")])
def test_extract_failures(name, content):
    with pytest.raises(FileReadFailed) as exc:
        extract_text(name, content)
    assert name in exc.value.detail


def _graded():
    assignment = make_assignment(2)
    submission = Submission(
        assignment_id=assignment.id,
        student_name="Nguyễn  Văn A",
        student_class="10A1",
        answers={"q1": "b"},
    )
    result = GradingResult(
        score=5.0,
        feedback={"q1": "Đúng rồi", "q2": "Chưa làm"},
        overall_comment="Cần cố gắng hơn",
    )
    return assignment, submission, result


def test_results_workbook_rows():
    assignment, submission, result = _graded()
    sheet = load_workbook(BytesIO(build_results_workbook(assignment, submission, result))).active

    assert sheet.title == "Kết quả bài làm"
    assert sheet["A1"].value == "BÁO CÁO KẾT QUẢ BÀI TẬP"
    assert sheet["B4"].value == "Nguyễn  Văn A"
    assert sheet["B6"].value == "5.0 / 10"
    assert sheet["B7"].value == "Cần cố gắng hơn"
    assert [c.value for c in sheet[9]] == ["STT", "Câu hỏi", "Trả lời của HS", "Đáp án tham khảo", "Đánh giá chi tiết", "Kết quả"]
    assert [c.value for c in sheet[10]] == [1, assignment.questions[0].content, "y", "y", "Đúng rồi", "ĐÚNG"]
    assert [c.value for c in sheet[11]] == [2, assignment.questions[1].content, NO_ANSWER, "Đúng", "Chưa làm", "SAI"]


def test_export_filename_and_summary():
    assignment, submission, result = _graded()
    assert export_filename(submission) == "Ket_Qua_Nguyễn_Văn_A.xlsx"
    text = results_summary_text(assignment, submission, result)
    assert "- Điểm số: 5.0 / 10" in text
    assert assignment.title in text
