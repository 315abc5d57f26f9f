"""
π の桁が書かれた文書をページ単位で読み出す。

PdfPages / TextPages は len() でページ数を先に返し、イテレートすると
フィルタ済みのページ文字列を1枚ずつ遅延で返す（全体をメモリに載せない）。
読めない文書は SourceUnavailable（「見つからない」とは区別する）。
"""
import logging
import os
import re
from typing import Callable, Iterator, Optional

from pypdf import PdfReader
from pypdf.errors import PyPdfError

log = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 4096

_NON_DIGIT = re.compile(r"[^0-9]")
_NON_DIGIT_OR_POINT = re.compile(r"[^0-9.]")


class SourceUnavailable(RuntimeError):
    """The document could not be opened or read."""


def digits_only(text: str) -> str:
    return _NON_DIGIT.sub("", text)


def digits_and_point(text: str) -> str:
    return _NON_DIGIT_OR_POINT.sub("", text)


def get_filter(keep_point: bool = False) -> Callable[[str], str]:
    return digits_and_point if keep_point else digits_only


class PdfPages:
    def __init__(self, path: str, text_filter: Callable[[str], str] = digits_only):
        self.path = path
        self.text_filter = text_filter
        try:
            self._fp = open(path, "rb")
        except OSError as e:
            raise SourceUnavailable(f"cannot open {path}: {e}") from e
        try:
            self._reader = PdfReader(self._fp)
            self._num_pages = len(self._reader.pages)
        except (PyPdfError, OSError, ValueError) as e:
            self._fp.close()
            raise SourceUnavailable(f"cannot read PDF {path}: {e}") from e

    def __len__(self) -> int:
        return self._num_pages

    def __iter__(self) -> Iterator[str]:
        for page_num in range(self._num_pages):
            try:
                text = self._reader.pages[page_num].extract_text() or ""
            except (PyPdfError, OSError, ValueError) as e:
                raise SourceUnavailable(
                    f"cannot extract page {page_num + 1} of {self.path}: {e}"
                ) from e
            yield self.text_filter(text)

    def close(self):
        self._fp.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()


class TextPages:
    """Plain text digit dump split into fixed-size pages."""

    def __init__(self, path: str, text_filter: Callable[[str], str] = digits_only,
                 page_size: int = DEFAULT_PAGE_SIZE):
        if page_size <= 0:
            raise ValueError(f"page_size must be positive, got {page_size}")
        self.path = path
        self.text_filter = text_filter
        self.page_size = page_size
        try:
            self._fp = open(path, "r", encoding="ascii", newline="")
            self._size = os.fstat(self._fp.fileno()).st_size
        except OSError as e:
            raise SourceUnavailable(f"cannot open {path}: {e}") from e

    def __len__(self) -> int:
        return -(-self._size // self.page_size)

    def __iter__(self) -> Iterator[str]:
        # ascii なので文字数 == バイト数。
        # ファイルは共有なので、イテレータごとに読み位置を持って毎回 seek する
        pos = 0
        while True:
            try:
                self._fp.seek(pos)
                page = self._fp.read(self.page_size)
                pos = self._fp.tell()
            except (OSError, UnicodeDecodeError) as e:
                raise SourceUnavailable(f"cannot read {self.path}: {e}") from e
            if not page:
                return
            yield self.text_filter(page)

    def close(self):
        self._fp.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()


def open_pages(path: str, keep_point: bool = False, page_size: Optional[int] = None):
    """拡張子で PdfPages / TextPages を選ぶ。with 文で使うこと。"""
    text_filter = get_filter(keep_point)
    if path.lower().endswith(".pdf"):
        log.debug("opening %s as PDF", path)
        return PdfPages(path, text_filter)
    log.debug("opening %s as text (page_size=%s)", path, page_size)
    return TextPages(path, text_filter, page_size or DEFAULT_PAGE_SIZE)
