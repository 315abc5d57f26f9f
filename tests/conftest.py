import os
from typing import List

import pytest

# 小数点以下 200 桁
PI_FRACTION = (
    "1415926535897932384626433832795028841971693993751058209749445923078164062862089986280348253421170679"
    "8214808651328230664709384460955058223172535940812848111745028410270193852110555964462294895493038196"
)
PI_DIGITS = "3" + PI_FRACTION


def pi_digits_spigot():
    """Gibbons の spigot。整数演算だけで π の桁を 3, 1, 4, ... と正確に返す。"""
    q, r, t, k, n, l = 1, 0, 1, 1, 3, 3
    while True:
        if 4 * q + r - t < n * t:
            yield n
            q, r, n = 10 * q, 10 * (r - n * t), (10 * (3 * q + r)) // t - 10 * n
        else:
            q, r, t, k, n, l = (
                q * k,
                (2 * q + r) * l,
                t * l,
                k + 1,
                (q * (7 * k + 2) + r * l) // (t * l),
                l + 2,
            )


@pytest.fixture(scope="session")
def pi_reference():
    """小数点以下 900 桁（762〜767 桁目の 999999 を含む）。"""
    g = pi_digits_spigot()
    next(g)
    return "".join(str(next(g)) for _ in range(900))


def chunks_of(text: str, size: int) -> List[str]:
    return [text[i:i + size] for i in range(0, len(text), size)]


def make_pdf(path: str, pages: List[str]) -> None:
    """Write a minimal PDF with one line of Helvetica text per page."""
    n = len(pages)
    objects = [
        b"<< /Type /Catalog /Pages 2 0 R >>",
        None,  # pages tree, filled below
        b"<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica >>",
    ]
    kids = []
    for text in pages:
        page_id = len(objects) + 1
        content_id = page_id + 1
        kids.append(f"{page_id} 0 R")
        objects.append(
            (
                "<< /Type /Page /Parent 2 0 R /MediaBox [0 0 612 792] "
                f"/Resources << /Font << /F1 3 0 R >> >> /Contents {content_id} 0 R >>"
            ).encode()
        )
        stream = f"BT /F1 12 Tf 72 712 Td ({text}) Tj ET".encode() if text else b"BT ET"
        objects.append(
            b"<< /Length %d >>\nstream\n" % len(stream) + stream + b"\nendstream"
        )
    objects[1] = f"<< /Type /Pages /Kids [{' '.join(kids)}] /Count {n} >>".encode()

    out = bytearray(b"%PDF-1.4\n")
    offsets = []
    for i, body in enumerate(objects, 1):
        offsets.append(len(out))
        out += b"%d 0 obj\n" % i + body + b"\nendobj\n"
    xref = len(out)
    out += b"xref\n0 %d\n" % (len(objects) + 1)
    out += b"0000000000 65535 f \n"
    for off in offsets:
        out += b"%010d 00000 n \n" % off
    out += b"trailer\n<< /Size %d /Root 1 0 R >>\n" % (len(objects) + 1)
    out += b"startxref\n%d\n%%%%EOF\n" % xref

    with open(path, "wb") as f:
        f.write(bytes(out))


@pytest.fixture
def pi_text_file(tmp_path):
    """A plain text dump of pi with the decimal point and line breaks."""
    path = os.path.join(str(tmp_path), "pi.txt")
    with open(path, "w", newline="") as f:
        f.write("3.")
        for line in chunks_of(PI_FRACTION, 50):
            f.write(line + "\n")
    return path


@pytest.fixture
def pi_pdf_file(tmp_path):
    path = os.path.join(str(tmp_path), "pi.pdf")
    make_pdf(path, ["3.1415926535", "", "8979323846 2643383279", "5028841971"])
    return path
