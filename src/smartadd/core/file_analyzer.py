"""
File reading for smartadd.

Reads a selected file so it can be registered as context:
- Size limit
- Binary detection
- Encoding fallbacks
"""

import mimetypes
import os
from pathlib import Path
from typing import Optional, Tuple

from .models import SelectionConfig


class FileAnalyzer:
    """Handles content extraction for selected files."""

    def __init__(self, config: SelectionConfig):
        self.config = config
        mimetypes.init()

    def is_binary_file(self, file_path: str, content: Optional[bytes] = None) -> bool:
        """
        Guess whether a file is binary.

        1. Check for null bytes in the first bytes of content
        2. Attempt UTF-8 decode of the sample
        3. Use mimetypes only when there is no content to inspect
        """
        if content is not None:
            sample = content[:self.config.binary_sample_size]
            if b'\x00' in sample:
                return True
            try:
                sample.decode('utf-8')
            except UnicodeDecodeError as e:
                # A multi-byte character cut at the sample boundary is still text
                if e.start < len(sample) - 4:
                    return True
            return False

        mime_type, _ = mimetypes.guess_type(file_path)
        if mime_type:
            return not (mime_type.startswith('text/') or mime_type in {
                'application/json', 'application/javascript', 'application/xml',
                'application/x-sh', 'application/toml', 'application/x-yaml',
            })
        return False

    def read_file_content(self, file_path: str) -> Tuple[Optional[str], Optional[str]]:
        """
        Read file content with multiple encoding fallbacks.

        Returns:
            Tuple of (content, error_message)
            If successful, content is the file text and error_message is None
            If failed, content is None and error_message describes the issue
        """
        try:
            file_size = os.path.getsize(file_path)
            if file_size > self.config.max_file_size:
                return None, f"File too large ({file_size:,} bytes)"

            raw_content = Path(file_path).read_bytes()

            if self.is_binary_file(file_path, raw_content):
                return None, "Binary file"

            for encoding in self.config.encoding_fallbacks:
                try:
                    return raw_content.decode(encoding), None
                except UnicodeDecodeError:
                    continue

            return None, "Unable to decode file with available encodings"

        except PermissionError:
            return None, "Permission denied"
        except OSError as e:
            return None, f"Error reading file: {e}"
