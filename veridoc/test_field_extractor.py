# test_field_extractor.py
# Extraction tests over OCR-like text samples for each supported document type.

import unittest

from veridoc.models import DocumentClass
from veridoc.services.field_extractor import extract_fields, first_match

AADHAR_TEXT = """
GOVERNMENT OF INDIA
JOHN DOE
DOB: 01/01/1990
Male
1234 5678 9123
"""

AADHAR_LABELED_TEXT = """
GOVERNMENT OF INDIA
Name: Priya Sharma
Father: RAMESH SHARMA
Date of Birth: 15-08-1995
FEMALE
Address: 12 MG Road, Sector 4
Indiranagar, Bengaluru
Karnataka 560038
4321 8765 2109
"""

PAN_TEXT = """
INCOME TAX DEPARTMENT
RAHUL KUMAR
RAJESH KUMAR
31/10/1992
Permanent Account Number
abcde1234f
"""

PAN_LABELED_TEXT = """
INCOME TAX DEPARTMENT
Name
RAHUL KUMAR
Father's Name
RAJESH KUMAR
Date of Birth
31/10/1992
ABCDE1234F
"""

CBSE_TEXT = """
CENTRAL BOARD OF SECONDARY EDUCATION
SENIOR SECONDARY SCHOOL EXAMINATION 2023
Roll No: 23226443
Name: MOHD NASAR KHAN
Mother's Name: SALMA BEGUM
School: KENDRIYA VIDYALAYA NO 1
013 ENGLISH 100 071
050 MATHEMATICS 100 093
"""

STATE_BOARD_TEXT = """
MAHARASHTRA STATE BOARD OF SECONDARY
SECONDARY SCHOOL CERTIFICATE EXAMINATION MARCH 2019
SEAT NO B 123456
SAVITA ANIL PATIL
ENGLISH 100 075
MARATHI 100 081
MATHEMATICS 100 090
SCIENCE 100 084
TOTAL 330/400
"""

UNLABELED_TRANSCRIPT_TEXT = """
ST XAVIERS HIGH SCHOOL
ANNUAL RESULT
CENTRE NO
4455
ANJALI VERMA
778899
2021
"""


class TestStrategyChain(unittest.TestCase):

    def test_first_success_wins_and_later_strategies_do_not_run(self):
        calls = []

        def miss():
            calls.append("miss")
            return None

        def hit():
            calls.append("hit")
            return "value"

        def never():
            calls.append("never")
            return "other"

        self.assertEqual(first_match((miss, hit, never)), "value")
        self.assertEqual(calls, ["miss", "hit"])

    def test_no_success(self):
        self.assertIsNone(first_match((lambda: None, lambda: "")))


class TestIdentityCardExtraction(unittest.TestCase):

    def test_grouped_number_is_stored_as_digits(self):
        fields = extract_fields(DocumentClass.IDENTITY_CARD, AADHAR_TEXT)
        self.assertEqual(fields["aadharNumber"], "123456789123")
        self.assertEqual(fields["dateOfBirth"], "01/01/1990")
        self.assertEqual(fields["gender"], "Male")

    def test_first_all_caps_line_is_the_fallback_name(self):
        fields = extract_fields("aadhar", AADHAR_TEXT)
        self.assertEqual(fields["name"], "GOVERNMENT OF INDIA")

    def test_labeled_name_takes_precedence(self):
        fields = extract_fields("aadhar", AADHAR_LABELED_TEXT)
        self.assertEqual(fields["name"], "Priya Sharma")
        self.assertEqual(fields["dateOfBirth"], "15-08-1995")
        self.assertEqual(fields["gender"], "Female")
        self.assertEqual(fields["aadharNumber"], "432187652109")
        self.assertEqual(fields["address"],
                         "12 MG Road, Sector 4, Indiranagar, Bengaluru, Karnataka 560038")

    def test_contiguous_number(self):
        fields = extract_fields("aadhar", "UID 987654321098")
        self.assertEqual(fields["aadharNumber"], "987654321098")

    def test_eleven_digits_is_not_an_id_number(self):
        fields = extract_fields("aadhar", "1234 5678 912")
        self.assertNotIn("aadharNumber", fields)


class TestTaxCardExtraction(unittest.TestCase):

    def test_positional_fields(self):
        fields = extract_fields(DocumentClass.TAX_CARD, PAN_TEXT)
        self.assertEqual(fields["panNumber"], "ABCDE1234F")
        self.assertEqual(fields["name"], "INCOME TAX DEPARTMENT")
        self.assertEqual(fields["fatherName"], "RAHUL KUMAR")
        self.assertEqual(fields["dateOfBirth"], "31/10/1992")

    def test_labeled_fields_win(self):
        fields = extract_fields("pan", PAN_LABELED_TEXT)
        self.assertEqual(fields["name"], "RAHUL KUMAR")
        self.assertEqual(fields["fatherName"], "RAJESH KUMAR")
        self.assertEqual(fields["panNumber"], "ABCDE1234F")

    def test_short_tax_id_is_ignored(self):
        self.assertNotIn("panNumber", extract_fields("pan", "ABCD1234F"))

    def test_first_date_is_taken_even_if_it_is_an_issue_date(self):
        fields = extract_fields("pan", "Issued 01/04/2015\nDOB 31/10/1992")
        self.assertEqual(fields["dateOfBirth"], "01/04/2015")


class TestTranscriptExtraction(unittest.TestCase):

    def test_cbse_marksheet(self):
        fields = extract_fields(DocumentClass.TRANSCRIPT, CBSE_TEXT)
        self.assertEqual(fields["rollNumber"], "23226443")
        self.assertEqual(fields["studentName"], "MOHD NASAR KHAN")
        self.assertEqual(fields["board"], "Central Board of Secondary Education (CBSE)")
        self.assertEqual(fields["year"], "2023")
        self.assertEqual(fields["class"], "12th")
        self.assertEqual(fields["subjects"], "English: 71/100\nMathematics: 93/100")
        self.assertEqual(fields["percentage"], "82.00")

    def test_state_board_marksheet(self):
        fields = extract_fields("marksheet", STATE_BOARD_TEXT)
        self.assertEqual(fields["rollNumber"], "B123456")
        self.assertEqual(fields["studentName"], "SAVITA ANIL PATIL")
        self.assertEqual(fields["board"], "Maharashtra State Board of Secondary and Higher Secondary Education")
        self.assertEqual(fields["year"], "2019")
        self.assertEqual(fields["class"], "10th")
        self.assertEqual(fields["subjects"].splitlines(), [
            "English: 75/100", "Marathi: 81/100", "Mathematics: 90/100", "Science: 84/100",
        ])
        self.assertEqual(fields["percentage"], "82.50")

    def test_letter_seat_number_without_label(self):
        fields = extract_fields("marksheet", "RESULT SHEET\nB 654321\n")
        self.assertEqual(fields["rollNumber"], "B654321")

    def test_standalone_number_skips_centre_and_year(self):
        fields = extract_fields("marksheet", UNLABELED_TRANSCRIPT_TEXT)
        self.assertEqual(fields["rollNumber"], "778899")
        self.assertEqual(fields["studentName"], "ANJALI VERMA")
        self.assertEqual(fields["board"], "ST XAVIERS HIGH SCHOOL")
        self.assertEqual(fields["year"], "2021")
        self.assertNotIn("class", fields)

    def test_lowercase_up_is_not_a_board_name(self):
        fields = extract_fields("marksheet", "Well done, keep it up\nSunrise Public School\nANNUAL RESULT 2022")
        self.assertEqual(fields["board"], "Sunrise Public School")

    def test_up_abbreviation_names_the_board(self):
        fields = extract_fields("marksheet", "Keep it up\nUP MADHYAMIK SHIKSHA PARISHAD")
        self.assertEqual(fields["board"], "UP MADHYAMIK SHIKSHA PARISHAD")

    def test_no_subjects_means_no_percentage(self):
        fields = extract_fields("marksheet", "ROLL NO 1234\nUNIVERSITY OF DELHI")
        self.assertNotIn("subjects", fields)
        self.assertNotIn("percentage", fields)


class TestExtractionTotality(unittest.TestCase):

    def test_empty_and_missing_text(self):
        for doc_class in DocumentClass:
            for raw in ("", "   \n  ", None):
                with self.subTest(doc_class=doc_class, raw=raw):
                    self.assertEqual(extract_fields(doc_class, raw), {})

    def test_unknown_document_class(self):
        self.assertEqual(extract_fields("passport", AADHAR_TEXT), {})

    def test_repeated_extraction_is_identical(self):
        for doc_class, text in ((DocumentClass.IDENTITY_CARD, AADHAR_LABELED_TEXT),
                                (DocumentClass.TAX_CARD, PAN_TEXT),
                                (DocumentClass.TRANSCRIPT, CBSE_TEXT)):
            with self.subTest(doc_class=doc_class):
                self.assertEqual(extract_fields(doc_class, text), extract_fields(doc_class, text))

    def test_garbage_input_does_not_raise(self):
        garbage = "\x00\x01 ((( ]]] *** 99999999999999999 //// कख ROLL NO: NAME:"
        for doc_class in DocumentClass:
            with self.subTest(doc_class=doc_class):
                self.assertIsInstance(extract_fields(doc_class, garbage), dict)


if __name__ == "__main__":
    unittest.main(verbosity=2)
