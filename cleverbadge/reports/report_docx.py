from docx import Document


def generate_report_docx(report: dict, file_path: str):
    doc = Document()

    # Title
    doc.add_heading(f"Assessment Report: {report['test']['title']}", level=1)
    doc.add_paragraph(f"Candidate: {report['candidate']['name']}")

    # Summary
    doc.add_heading("Summary", level=2)
    for line in report["summary"]:
        doc.add_paragraph(line)

    # Scores
    doc.add_heading("Overall Score", level=2)
    scores = report["scores"]
    doc.add_paragraph(
        f"Score: {scores['earned_weight']} / {scores['total_weight']} "
        f"({scores['display_percentage']}%)"
    )
    doc.add_paragraph(f"Status: {scores['label']}")

    if report["strengths"]:
        doc.add_heading("Strengths", level=2)
        for s in report["strengths"]:
            doc.add_paragraph(s, style="List Bullet")

    if report["weaknesses"]:
        doc.add_heading("Areas to Improve", level=2)
        for w in report["weaknesses"]:
            doc.add_paragraph(w, style="List Bullet")

    # Per question
    doc.add_heading("Questions", level=2)
    table = doc.add_table(rows=1, cols=4)
    header = table.rows[0].cells
    header[0].text = "#"
    header[1].text = "Question"
    header[2].text = "Weight"
    header[3].text = "Result"
    for q in report["question_breakdown"]:
        if not q["answered"]:
            outcome = "Unanswered"
        else:
            outcome = "Correct" if q["is_correct"] else "Incorrect"
        cells = table.add_row().cells
        cells[0].text = str(q["question_number"])
        cells[1].text = q["text"]
        cells[2].text = str(q["weight"])
        cells[3].text = outcome

    doc.save(file_path)
