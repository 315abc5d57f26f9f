"""
ページ単位に分割された数字列に対するストリーミング KMP 検索。

search() は pattern の最初の出現位置（全ページを連結した座標、0始まり）を返す。
見つからなければ None。ページは呼び出し側でフィルタ済みであること。
"""
import logging
from typing import Iterator, List, Optional, Protocol, Tuple

log = logging.getLogger(__name__)

INITIAL_AVG_CHUNK_LEN = 1000  # まだ1ページも計測していない時の保守的な見積もり


class ChunkSource(Protocol):
    """len() が事前に分かる、順序付きのページ列。list や pages.PdfPages など。"""

    def __len__(self) -> int: ...

    def __iter__(self) -> Iterator[str]: ...


def build_lps(pattern: str) -> List[int]:
    """
    lps[i] = pattern[0..i] の真の接頭辞かつ接尾辞である最長の長さ。
    lps[0] は常に 0。
    """
    lps = [0] * len(pattern)
    j = 0
    i = 1
    while i < len(pattern):
        if pattern[i] == pattern[j]:
            j += 1
            lps[i] = j
            i += 1
        elif j != 0:
            j = lps[j - 1]
        else:
            lps[i] = 0
            i += 1
    return lps


def advance(pattern: str, lps: List[int], text: str, j: int) -> Tuple[Optional[int], int]:
    """
    text 1ページ分だけ KMP を進める。

    j は前ページから持ち越した一致長。戻り値は (found, new_j)。
    found はページ内の一致開始位置で、前のページに食い込む場合は負になる。
    完全一致したら new_j は 0 に戻す。
    """
    m = len(pattern)
    n = len(text)
    i = 0
    while i < n:
        if pattern[j] == text[i]:
            i += 1
            j += 1
            if j == m:
                return i - m, 0
        elif j != 0:
            j = lps[j - 1]
        else:
            i += 1
    return None, j


def search(pattern: str, chunks: ChunkSource, early_termination: bool = True) -> Optional[int]:
    """
    chunks を先頭から順に走査して pattern を探す。

    early_termination=True の場合、これまでのページ長の平均から
    「残りのページで pattern を完成できない」と見積もった時点で
    一致状態を捨てる / 走査を打ち切る。あくまで見積もりなので、
    ページ長が大きくばらつくと実在する一致を取りこぼすことがある。
    取りこぼしが許されない呼び出し側は early_termination=False で全走査すること。
    """
    if not pattern:
        raise ValueError("pattern must not be empty")

    m = len(pattern)
    lps = build_lps(pattern)
    total = len(chunks)

    j = 0  # ページをまたいで持ち越す一致長
    offset = 0
    seen_len = 0
    seen_count = 0

    for page_num, chunk in enumerate(chunks, 1):
        if not chunk:
            continue

        found, j = advance(pattern, lps, chunk, j)
        if found is not None:
            return offset + found

        seen_len += len(chunk)
        seen_count += 1
        offset += len(chunk)

        if not early_termination:
            continue

        avg = seen_len // seen_count if seen_count else INITIAL_AVG_CHUNK_LEN

        if page_num < total:
            capacity = (total - page_num) * avg
            if capacity < m - j:
                log.debug("page %d: estimated capacity %d < %d, resetting cursor %d",
                          page_num, capacity, m - j, j)
                j = 0

        # 残りのページに pattern が収まらないと見積もった
        if j == 0 and offset + avg < m:
            log.debug("page %d: giving up at offset %d (avg page %d, pattern %d)",
                      page_num, offset, avg, m)
            break

    return None
