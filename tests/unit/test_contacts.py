from resume_parsing import extract_contact, extract_name, extract_phone, parse_resume_text


def test_extracts_name_email_phone_from_header_lines():
    contact = extract_contact("Jane Doe\njane@x.com\n555-123-4567")
    assert contact.name == "Jane Doe"
    assert contact.email == "jane@x.com"
    assert contact.phone == "555-123-4567"


def test_uppercase_name_is_accepted():
    assert extract_name("JOHN SMITH\nSoftware Engineer\njohn@example.com") == "JOHN SMITH"


def test_name_on_second_line_preferred_over_title():
    assert extract_name("Curriculum vitae\nJane Doe\nSenior developer") == "Jane Doe"


def test_name_falls_back_to_first_line():
    assert extract_name("resume of a developer\nskills: python") == "resume of a developer"


def test_phone_with_country_code():
    assert extract_phone("Call +91 9876543210 anytime") == "+91 9876543210"


def test_missing_fields_are_empty_strings():
    contact = extract_contact("")
    assert (contact.name, contact.email, contact.phone) == ("", "", "")


def test_parse_resume_text_keeps_raw_text_and_filename():
    text = "Jane Doe\njane@x.com"
    parsed = parse_resume_text(text, "cv.pdf")
    assert parsed.rawText == text
    assert parsed.filename == "cv.pdf"
    assert parsed.phone == ""
