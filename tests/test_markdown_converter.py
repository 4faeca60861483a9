"""Tests for HTML to Markdown backends."""

import subprocess
import unittest
from unittest.mock import patch

from converters.markdown_converter import (
    ConversionError,
    MarkdownConverter,
    PandocConverter,
    create_converter,
)


class TestMarkdownConverter(unittest.TestCase):
    def test_converts_headings_and_emphasis(self):
        markdown = MarkdownConverter().convert('<h1>Title</h1><p>Some <b>bold</b> text</p>')

        self.assertIn('# Title', markdown)
        self.assertIn('**bold**', markdown)

    def test_linked_image_keeps_both_urls(self):
        html = '<a href="https://x.example/o.jpg"><img src="https://x.example/t.jpg"></a>'

        markdown = MarkdownConverter().convert(html)

        self.assertIn('https://x.example/o.jpg', markdown)
        self.assertIn('https://x.example/t.jpg', markdown)

    def test_bullets_option(self):
        markdown = MarkdownConverter(bullets='*').convert('<ul><li>one</li></ul>')

        self.assertIn('* one', markdown)


class TestPandocConverter(unittest.TestCase):
    @patch('converters.markdown_converter.subprocess.run')
    def test_invokes_pandoc_with_html_on_stdin(self, mock_run):
        mock_run.return_value = subprocess.CompletedProcess(args=[], returncode=0, stdout=b'# Title\n', stderr=b'')

        markdown = PandocConverter(pandoc_path='/opt/pandoc', output_format='commonmark').convert('<h1>Title</h1>')

        self.assertEqual(markdown, '# Title\n')
        args, kwargs = mock_run.call_args
        self.assertEqual(args[0], ['/opt/pandoc', '--from=html', '--to=commonmark'])
        self.assertEqual(kwargs['input'], '<h1>Title</h1>'.encode('utf-8'))
        self.assertTrue(kwargs['capture_output'])

    @patch('converters.markdown_converter.subprocess.run')
    def test_nonzero_exit_reports_stderr(self, mock_run):
        mock_run.return_value = subprocess.CompletedProcess(args=[], returncode=64, stdout=b'', stderr=b'bad input')

        with self.assertRaises(ConversionError) as ctx:
            PandocConverter().convert('<p>x</p>')

        self.assertEqual(str(ctx.exception), 'External command failed:\n bad input')

    @patch('converters.markdown_converter.subprocess.run', side_effect=FileNotFoundError('pandoc'))
    def test_missing_binary(self, mock_run):
        with self.assertRaises(ConversionError):
            PandocConverter().convert('<p>x</p>')

    @patch('converters.markdown_converter.subprocess.run', side_effect=subprocess.TimeoutExpired('pandoc', 1))
    def test_timeout(self, mock_run):
        with self.assertRaises(ConversionError):
            PandocConverter(timeout=1).convert('<p>x</p>')


class TestCreateConverter(unittest.TestCase):
    def test_default_is_markdownify(self):
        self.assertIsInstance(create_converter(), MarkdownConverter)

    def test_pandoc_backend(self):
        converter = create_converter({'converter': {'backend': 'pandoc', 'pandoc_format': 'markdown'}})

        self.assertIsInstance(converter, PandocConverter)
        self.assertEqual(converter.output_format, 'markdown')

    def test_unknown_backend(self):
        with self.assertRaises(ValueError):
            create_converter({'converter': {'backend': 'html2text'}})


if __name__ == '__main__':
    unittest.main()
