import unittest
from file_organizer.classifier import (
    NO_EXTENSION,
    classify_name,
    extension_of,
    is_category_name,
    split_name,
)


class TestClassifier(unittest.TestCase):
    def test_basic_extensions(self):
        self.assertEqual(classify_name("photo.jpg"), "jpg")
        self.assertEqual(classify_name("notes.txt"), "txt")
        self.assertEqual(classify_name("Report.PDF"), "pdf")

    def test_no_extension(self):
        self.assertEqual(classify_name("README"), NO_EXTENSION)
        self.assertEqual(classify_name("Makefile"), NO_EXTENSION)
        self.assertEqual(classify_name(""), NO_EXTENSION)

    def test_dotfiles(self):
        """A single leading dot does not make an extension."""
        self.assertEqual(classify_name(".bashrc"), NO_EXTENSION)
        self.assertEqual(classify_name(".gitignore"), NO_EXTENSION)
        # A further dot does
        self.assertEqual(classify_name(".config.json"), "json")

    def test_trailing_dot(self):
        self.assertEqual(classify_name("draft."), NO_EXTENSION)
        self.assertEqual(extension_of("draft."), "")

    def test_multi_part_extension_uses_last_segment(self):
        self.assertEqual(classify_name("archive.tar.gz"), "gz")
        self.assertEqual(extension_of("backup.2024.01.zip"), "zip")

    def test_classification_is_total_and_deterministic(self):
        names = [
            "a.txt", "A.TXT", "README", ".env", "..", "...", "x.", ".a.b",
            "weird name (1).Mp3", "ünïcödé.ÄBC", "no.ext.",
        ]
        for name in names:
            first = classify_name(name)
            self.assertIsInstance(first, str)
            self.assertTrue(first)
            self.assertEqual(first, classify_name(name))
            self.assertEqual(first, first.lower())

    def test_split_name(self):
        self.assertEqual(split_name("a.txt"), ("a", ".txt"))
        self.assertEqual(split_name("archive.tar.gz"), ("archive.tar", ".gz"))
        self.assertEqual(split_name("README"), ("README", ""))
        self.assertEqual(split_name(".bashrc"), (".bashrc", ""))
        self.assertEqual(split_name("Photo.JPG"), ("Photo", ".JPG"))

    def test_is_category_name(self):
        self.assertTrue(is_category_name("txt"))
        self.assertTrue(is_category_name(NO_EXTENSION))
        self.assertFalse(is_category_name("Photos"))
        self.assertFalse(is_category_name("my docs"))
        self.assertFalse(is_category_name(".git"))
        self.assertFalse(is_category_name(""))


if __name__ == "__main__":
    unittest.main()
