import base64
import io
import json
import os
import tempfile
import unittest
from unittest.mock import MagicMock, patch

import numpy as np
import requests
from PIL import Image

from photopicker.detection.base import DetectorError
from photopicker.detection.remote import (
    FileSegmenter,
    RemoteSegmenter,
    load_response,
    parse_response,
)


def encode_png(size=(8, 6)):
    buffer = io.BytesIO()
    Image.new("RGB", size, color="red").save(buffer, format="PNG")
    return base64.b64encode(buffer.getvalue()).decode("ascii")


PAYLOAD = {
    "original_image": encode_png(),
    "masks": [
        {"mask": [[0, 1, 1], [0, 1, 1]], "score": 0.8, "label": "cat"},
        {"mask": [[1, 0, 0], [1, 0, 0]], "confidence": 0.4},
        {"mask": [[0, 0, 0], [0, 0, 0]]},
    ],
}


class TestParseResponse(unittest.TestCase):
    def test_parses_masks_scores_and_labels(self):
        response = parse_response(PAYLOAD)

        self.assertEqual(len(response.masks), 3)
        np.testing.assert_array_equal(response.masks[0], np.array([[0, 1, 1], [0, 1, 1]]))
        self.assertEqual(response.scores, [0.8, 0.4, None])
        self.assertEqual(response.labels, ["cat", None, None])
        self.assertEqual(response.preview_image.size, (8, 6))
        self.assertEqual(response.size, (8, 6))

    def test_preview_is_optional(self):
        response = parse_response({"masks": []})
        self.assertIsNone(response.preview_image)
        self.assertEqual(response.masks, [])

    def test_missing_masks_raises(self):
        with self.assertRaises(DetectorError):
            parse_response({"original_image": encode_png()})

    def test_entry_without_mask_raises(self):
        with self.assertRaises(DetectorError):
            parse_response({"masks": [{"score": 0.5}]})

    def test_non_2d_mask_raises(self):
        with self.assertRaises(DetectorError):
            parse_response({"masks": [{"mask": [1, 0, 1]}]})

    def test_ragged_mask_raises(self):
        with self.assertRaises(DetectorError):
            parse_response({"masks": [{"mask": [[1, 0], [1]]}]})

    def test_out_of_range_mask_values_raise(self):
        for grid in ([[0, -1], [1, 1]], [[0, 256], [1, 1]]):
            with self.subTest(grid=grid):
                with self.assertRaises(DetectorError):
                    parse_response({"masks": [{"mask": grid}]})

    def test_non_binary_float_mask_raises(self):
        with self.assertRaises(DetectorError):
            parse_response({"masks": [{"mask": [[0.0, 0.7], [1.0, 0.2]]}]})

    def test_string_mask_raises(self):
        with self.assertRaises(DetectorError):
            parse_response({"masks": [{"mask": [["a", "b"]]}]})

    def test_binary_float_and_bool_masks_are_accepted(self):
        response = parse_response(
            {"masks": [{"mask": [[0.0, 1.0]]}, {"mask": [[True, False]]}]}
        )
        np.testing.assert_array_equal(response.masks[0], np.array([[0, 1]]))
        np.testing.assert_array_equal(response.masks[1], np.array([[1, 0]]))
        self.assertEqual(response.masks[0].dtype, np.uint8)

    def test_bad_score_raises(self):
        with self.assertRaises(DetectorError):
            parse_response({"masks": [{"mask": [[1]], "score": "high"}]})

    def test_bad_preview_raises(self):
        with self.assertRaises(DetectorError):
            parse_response({"masks": [], "original_image": "not base64!"})


class TestLoadResponse(unittest.TestCase):
    def test_reads_json_file(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "response.json")
            with open(path, "w", encoding="utf-8") as f:
                json.dump(PAYLOAD, f)

            response = load_response(path)
            self.assertEqual(len(response.masks), 3)

            replayed = FileSegmenter(path).segment("ignored.jpg", 1, 1, 0.5)
            self.assertEqual(replayed.scores, response.scores)

    def test_missing_file_raises(self):
        with self.assertRaises(DetectorError):
            load_response("/nonexistent/response.json")

    def test_invalid_json_raises(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "response.json")
            with open(path, "w", encoding="utf-8") as f:
                f.write("{not json")
            with self.assertRaises(DetectorError):
                load_response(path)


class TestRemoteSegmenter(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.image_path = os.path.join(self.tmp.name, "photo.jpg")
        with open(self.image_path, "wb") as f:
            f.write(b"fake")

    def tearDown(self):
        self.tmp.cleanup()

    def make_session(self, payload=None):
        session = MagicMock()
        response = MagicMock()
        response.json.return_value = payload
        session.post.return_value = response
        return session, response

    def test_posts_form_fields(self):
        session, _ = self.make_session(PAYLOAD)
        segmenter = RemoteSegmenter("http://detector/detect/", timeout=5.0, session=session)

        result = segmenter.segment(self.image_path, 768, 512, 0.5)

        self.assertEqual(len(result.masks), 3)
        args, kwargs = session.post.call_args
        self.assertEqual(args, ("http://detector/detect/",))
        self.assertEqual(kwargs["data"], {"width": "768", "height": "512", "threshold": "0.5"})
        self.assertIn("file", kwargs["files"])
        self.assertEqual(kwargs["timeout"], 5.0)

    @patch("photopicker.detection.remote.requests.Session")
    def test_creates_default_session(self, mock_session_cls):
        session, _ = self.make_session({"masks": []})
        mock_session_cls.return_value = session

        segmenter = RemoteSegmenter("http://detector/detect/")
        segmenter.segment(self.image_path, 10, 10, 0.5)

        mock_session_cls.assert_called_once_with()
        session.post.assert_called_once()

    def test_connection_error_raises_detector_error(self):
        session, _ = self.make_session()
        session.post.side_effect = requests.ConnectionError("refused")
        segmenter = RemoteSegmenter("http://detector/detect/", session=session)

        with self.assertRaises(DetectorError) as ctx:
            segmenter.segment(self.image_path, 10, 10, 0.5)
        self.assertIsInstance(ctx.exception.__cause__, requests.ConnectionError)

    def test_http_error_raises_detector_error(self):
        session, response = self.make_session()
        response.raise_for_status.side_effect = requests.HTTPError("500 Server Error")
        segmenter = RemoteSegmenter("http://detector/detect/", session=session)

        with self.assertRaises(DetectorError):
            segmenter.segment(self.image_path, 10, 10, 0.5)

    def test_non_json_body_raises_detector_error(self):
        session, response = self.make_session()
        response.json.side_effect = ValueError("Expecting value")
        segmenter = RemoteSegmenter("http://detector/detect/", session=session)

        with self.assertRaises(DetectorError):
            segmenter.segment(self.image_path, 10, 10, 0.5)

    def test_missing_image_raises_detector_error(self):
        session, _ = self.make_session(PAYLOAD)
        segmenter = RemoteSegmenter("http://detector/detect/", session=session)

        with self.assertRaises(DetectorError):
            segmenter.segment(os.path.join(self.tmp.name, "missing.jpg"), 10, 10, 0.5)
        session.post.assert_not_called()


if __name__ == "__main__":
    unittest.main()
