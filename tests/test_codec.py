from __future__ import annotations

import unittest

from daybook.client.codec import (
    PayloadError,
    build_sort_payload,
    decode_memo,
    encode_memo,
    flatten_payload,
)
from daybook.client.models import TodoType
from daybook.services.forms import parse_form


class TestFlattenPayload(unittest.TestCase):
    def test_scalars(self) -> None:
        fields = flatten_payload({"userId": 3, "done": True, "skip": False, "memo": None, "type": TodoType.WORK})
        self.assertEqual(fields, {"userId": "3", "done": "true", "skip": "false", "memo": "", "type": "work"})

    def test_lists_and_nested_mappings(self) -> None:
        fields = flatten_payload({
            "id": [4, 9],
            "timeTaken": [{"start": "09:00", "end": "10:00"}],
        })
        self.assertEqual(fields, {
            "id[0]": "4",
            "id[1]": "9",
            "timeTaken[0][start]": "09:00",
            "timeTaken[0][end]": "10:00",
        })

    def test_server_parser_reads_what_the_client_writes(self) -> None:
        payload = {"id": [4, 9], "timeTaken": [{"start": "09:00", "end": "10:00"}], "name": "x"}
        parsed = parse_form(flatten_payload(payload).items())
        self.assertEqual(parsed, {
            "id": ["4", "9"],
            "timeTaken": [{"start": "09:00", "end": "10:00"}],
            "name": "x",
        })


class TestMemoCodec(unittest.TestCase):
    def test_encode_is_base64_of_utf8(self) -> None:
        self.assertEqual(encode_memo("メモ"), "44Oh44Oi")
        self.assertEqual(decode_memo("44Oh44Oi"), "メモ")

    def test_empty(self) -> None:
        self.assertEqual(encode_memo(""), "")
        self.assertEqual(decode_memo(""), "")
        self.assertEqual(decode_memo(None), "")

    def test_undecodable_values_are_kept(self) -> None:
        self.assertEqual(decode_memo("plain text, not base64!"), "plain text, not base64!")


class TestSortPayload(unittest.TestCase):
    def test_parallel_arrays(self) -> None:
        payload = build_sort_payload("todo", [5, 6], [0, 1], [2, 2])
        self.assertEqual(payload, {"tableType": "todo", "id": [5, 6], "sort": [0, 1], "sectionId": [2, 2]})

    def test_sections_have_no_section_ids(self) -> None:
        self.assertNotIn("sectionId", build_sort_payload("section", [1], [0]))

    def test_length_mismatch_is_refused(self) -> None:
        with self.assertRaises(PayloadError):
            build_sort_payload("section", [1, 2], [0])
        with self.assertRaises(PayloadError):
            build_sort_payload("todo", [1, 2], [0, 1], [3])


if __name__ == "__main__":
    unittest.main()
