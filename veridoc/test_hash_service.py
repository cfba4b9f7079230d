# test_hash_service.py
import hashlib
import unittest

from veridoc.models import DocumentClass
from veridoc.services.hash_service import fingerprint, normalize_field_map, sha256_of_bytes, verify_fingerprint

FIELDS = {"panNumber": "ABCDE1234F", "name": "Rahul Kumar", "dateOfBirth": "31/10/1992"}


class TestFingerprint(unittest.TestCase):

    def test_deterministic(self):
        self.assertEqual(fingerprint("pan", FIELDS), fingerprint(DocumentClass.TAX_CARD, dict(FIELDS)))

    def test_key_order_does_not_matter(self):
        reordered = dict(reversed(list(FIELDS.items())))
        self.assertEqual(fingerprint("pan", FIELDS), fingerprint("pan", reordered))

    def test_url_safe_without_padding(self):
        code = fingerprint("pan", FIELDS)
        self.assertEqual(len(code), 43)
        self.assertNotIn("=", code)
        self.assertNotIn("+", code)
        self.assertNotIn("/", code)

    def test_document_type_and_values_change_the_code(self):
        base = fingerprint("pan", FIELDS)
        self.assertNotEqual(base, fingerprint("aadhar", FIELDS))
        self.assertNotEqual(base, fingerprint("pan", dict(FIELDS, name="Rahul Kumar Singh")))

    def test_file_digest_changes_the_code(self):
        digest = sha256_of_bytes(b"%PDF-1.4 scanned card")
        self.assertNotEqual(fingerprint("pan", FIELDS), fingerprint("pan", FIELDS, digest))
        self.assertTrue(verify_fingerprint(fingerprint("pan", FIELDS, digest), "pan", FIELDS, digest))

    def test_blank_values_hash_like_missing_ones(self):
        padded = dict(FIELDS, fatherName="   ", name="  Rahul Kumar ")
        self.assertEqual(fingerprint("pan", FIELDS), fingerprint("pan", padded))

    def test_verify_rejects_edited_fields(self):
        code = fingerprint("pan", FIELDS)
        self.assertTrue(verify_fingerprint(code, "pan", FIELDS))
        self.assertFalse(verify_fingerprint(code, "pan", dict(FIELDS, panNumber="ABCDE1234G")))


class TestHelpers(unittest.TestCase):

    def test_sha256_of_bytes(self):
        self.assertEqual(sha256_of_bytes(b"abc"), hashlib.sha256(b"abc").hexdigest())
        self.assertEqual(sha256_of_bytes(None), hashlib.sha256(b"").hexdigest())

    def test_normalize_field_map(self):
        self.assertEqual(normalize_field_map({"a": " x ", "b": None, "c": "", "year": 2023}),
                         {"a": "x", "year": "2023"})
        self.assertEqual(normalize_field_map(None), {})


if __name__ == "__main__":
    unittest.main(verbosity=2)
