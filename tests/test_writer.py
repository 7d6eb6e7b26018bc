"""Tests for the file writer module."""

import os
import shutil
import tempfile
import threading
import unittest

from json_file_target.writer import FileWriter


class TestWriterBasic(unittest.TestCase):
    def setUp(self):
        self.tmpdir = tempfile.mkdtemp()
        self.path = os.path.join(self.tmpdir, "nested", "app.log")

    def tearDown(self):
        shutil.rmtree(self.tmpdir)

    def test_write_creates_file_and_directory(self):
        writer = FileWriter(self.path)
        writer.write('{"message": "hello"}')
        writer.close()
        with open(self.path, encoding="utf-8") as f:
            self.assertEqual(f.read(), '{"message": "hello"}\n')

    def test_no_file_until_first_write(self):
        writer = FileWriter(self.path)
        self.assertFalse(os.path.exists(self.path))
        writer.close()

    def test_write_appends_newline(self):
        writer = FileWriter(self.path)
        writer.write("line1")
        writer.write("line2\n")
        writer.close()
        with open(self.path, encoding="utf-8") as f:
            self.assertEqual(f.readlines(), ["line1\n", "line2\n"])

    def test_write_after_close_reopens(self):
        writer = FileWriter(self.path)
        writer.write("first")
        writer.close()
        writer.write("second")
        writer.close()
        with open(self.path, encoding="utf-8") as f:
            self.assertEqual(f.readlines(), ["first\n", "second\n"])

    def test_no_rotation_returns_false(self):
        writer = FileWriter(self.path)
        self.assertFalse(writer.write("small line"))
        writer.close()

    def test_invalid_max_log_files(self):
        with self.assertRaises(ValueError):
            FileWriter(self.path, max_log_files=0)


class TestRotation(unittest.TestCase):
    def setUp(self):
        self.tmpdir = tempfile.mkdtemp()
        self.path = os.path.join(self.tmpdir, "app.log")

    def tearDown(self):
        shutil.rmtree(self.tmpdir)

    def _fill(self, writer, blocks):
        rotations = 0
        for i in range(blocks):
            if writer.write(f"block {i:04d} " + "x" * 1100):
                rotations += 1
        return rotations

    def test_rotation_on_size(self):
        writer = FileWriter(self.path, max_file_size_kb=1, max_log_files=3)
        rotated = writer.write("x" * 2000)
        writer.close()

        self.assertTrue(rotated)
        self.assertTrue(os.path.exists(self.path + ".1"))
        self.assertFalse(os.path.exists(self.path))

    def test_files_shift_and_oldest_dropped(self):
        writer = FileWriter(self.path, max_file_size_kb=1, max_log_files=2)
        rotations = self._fill(writer, 4)
        writer.close()

        self.assertEqual(rotations, 4)
        self.assertEqual(writer.rotated_files(), [self.path + ".1", self.path + ".2"])
        self.assertFalse(os.path.exists(self.path + ".3"))
        with open(self.path + ".1", encoding="utf-8") as f:
            self.assertTrue(f.read().startswith("block 0003"))
        with open(self.path + ".2", encoding="utf-8") as f:
            self.assertTrue(f.read().startswith("block 0002"))

    def test_rotation_disabled(self):
        writer = FileWriter(
            self.path, enable_rotation=False, max_file_size_kb=1, max_log_files=2
        )
        rotations = self._fill(writer, 3)
        writer.close()

        self.assertEqual(rotations, 0)
        self.assertEqual(writer.rotated_files(), [])
        self.assertGreater(os.path.getsize(self.path), 3000)


class TestConcurrentWrites(unittest.TestCase):
    def setUp(self):
        self.tmpdir = tempfile.mkdtemp()
        self.path = os.path.join(self.tmpdir, "app.log")

    def tearDown(self):
        shutil.rmtree(self.tmpdir)

    def test_concurrent_writes(self):
        writer = FileWriter(self.path)
        num_threads = 5
        writes_per_thread = 100
        errors = []

        def worker(thread_id):
            try:
                for i in range(writes_per_thread):
                    writer.write(f"thread-{thread_id}-line-{i}")
            except Exception as e:
                errors.append(e)

        threads = [threading.Thread(target=worker, args=(t,)) for t in range(num_threads)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        writer.close()

        self.assertEqual(errors, [])
        with open(self.path, encoding="utf-8") as f:
            lines = f.readlines()
        self.assertEqual(len(lines), num_threads * writes_per_thread)
        for line in lines:
            self.assertRegex(line.strip(), r"^thread-\d+-line-\d+$")


if __name__ == "__main__":
    unittest.main()
