# attendance_ocr/llm/prompts/templates.py

PARSE_ATTENDANCE_V1 = """
You are helping a teacher digitise a paper attendance sheet (daftar hadir).
The text below was produced by OCR and may contain recognition errors.
Return STRICT JSON only (no markdown, no explanation).

Rules:
- Only report students that appear in the ROSTER. Match by registration
  number (NIS) first, then by name. Never invent students.
- Copy studentId, registrationNumber and name exactly as written in the ROSTER.
- status MUST be one of: "present", "sick", "permission", "absent".
  Map the marks on the sheet using the STATUS MARKS table.
- A roster row on the sheet with no readable mark is "absent".
- confidence is 0-100: how sure you are about this row (OCR noise, ambiguous mark).
- notes: any handwritten remark on the row, else omit.
- date: the sheet date as YYYY-MM-DD, or null if the sheet has no date.
- All JSON strings must be valid JSON. Escape quotes and newlines.

Return JSON with shape:
{
  "date": "YYYY-MM-DD|null",
  "records": [
    {
      "studentId": "string",
      "registrationNumber": "string",
      "name": "string",
      "status": "present|sick|permission|absent",
      "notes": "string (optional)",
      "confidence": 0-100
    }
  ]
}

ROSTER (studentId | registrationNumber | name):
{{roster}}

STATUS MARKS:
{{status_aliases}}

OCR TEXT:
{{ocr_text}}
""".strip()
