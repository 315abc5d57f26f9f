"""
Chudnovsky 級数で π を小数点以下 n 桁まで求める。

1項あたり約 14.18 桁ずつ精度が伸びるので、項数は (作業桁数) // 14 + 1 で足りる。
途中計算は n + GUARD_DIGITS 桁（有効桁）・四捨五入、最後だけ切り捨てる。
"""
import logging
from decimal import Decimal, ROUND_DOWN, ROUND_HALF_UP, localcontext

log = logging.getLogger(__name__)

GUARD_DIGITS = 10
MAX_SQRT_ITERATIONS = 10000  # 異常時の安全弁

C_FACTOR = 426880
SQRT_ARG = 10005
L_START = 13591409
L_STEP = 545140134
X_STEP = -262537412640768000
DIGITS_PER_TERM = 14


class ConvergenceError(ArithmeticError):
    pass


def decimal_sqrt(value, prec: int) -> Decimal:
    """
    Newton 法で sqrt(value) を有効桁 prec で求める。
    x1 = (value / x0 + x0) / 2 を不動点になるまで繰り返す。
    """
    with localcontext() as ctx:
        ctx.prec = prec
        ctx.rounding = ROUND_HALF_UP
        v = Decimal(value)
        if v < 0:
            raise ValueError(f"cannot take sqrt of negative value: {value}")
        if v == 0:
            return Decimal(0)
        x0 = Decimal(0)
        x1 = v
        for i in range(MAX_SQRT_ITERATIONS):
            if x0 == x1:
                return x1
            # 2回目以降は上から単調減少する。増えたら最終桁の丸めで振動している
            if i > 1 and x1 > x0:
                return x0
            x0 = x1
            x1 = (v / x0 + x0) / 2
        raise ConvergenceError(
            f"sqrt({value}) did not converge in {MAX_SQRT_ITERATIONS} iterations at prec={prec}"
        )


def chudnovsky_terms(n: int) -> int:
    return n // DIGITS_PER_TERM + 1


def unreliable_digits(terms: int) -> int:
    """末尾で丸め誤差が届きうる桁数。1項ごとに数回の四捨五入が積み重なる。"""
    return len(str(40 * (terms + 1)))


def chudnovsky_pi(prec: int, terms: int) -> Decimal:
    """有効桁 prec・四捨五入で、級数を k = 0..terms まで足した π の近似値。"""
    with localcontext() as ctx:
        ctx.prec = prec
        ctx.rounding = ROUND_HALF_UP

        c = C_FACTOR * decimal_sqrt(SQRT_ARG, prec)
        m = Decimal(1)  # (6k)! / ((3k)! (k!)^3)
        x = Decimal(1)  # (-262537412640768000)^k
        l = Decimal(L_START)
        s = Decimal(L_START)

        for k in range(1, terms + 1):
            # M_k / M_{k-1} = (12k-2)(12k-6)(12k-10) / k^3
            factor = (12 * k - 2) * (12 * k - 6) * (12 * k - 10)
            m = m * factor / (k ** 3)
            x *= X_STEP
            l += L_STEP
            s += m * l / x

        return c / s


def generate_digits(n: int) -> str:
    """
    π を小数点以下ちょうど n 桁で切り捨てた文字列（例: n=4 -> "3.1415"）。

    n 桁目の後ろが 999... や 000... だと、近似値の丸め誤差が n 桁目まで
    繰り上がる / 繰り下がることがある。n+1 桁目から誤差の届かない桁までが
    全部 9 か全部 0 なら、ガード桁を倍にして計算し直す。
    """
    if isinstance(n, bool) or not isinstance(n, int):
        raise ValueError(f"digits must be an integer, got {n!r}")
    if n <= 0:
        raise ValueError(f"digits must be positive, got {n}")

    guard = GUARD_DIGITS
    while True:
        prec = n + guard
        terms = chudnovsky_terms(prec)
        log.debug("generating %d digits: prec=%d terms=%d", n, prec, terms)
        pi = chudnovsky_pi(prec, terms)

        fraction = str(pi).split(".")[1]
        tail = fraction[n:len(fraction) - unreliable_digits(terms)]
        if tail.strip("9") and tail.strip("0"):
            break
        log.debug("digits after %d are ambiguous (%r), retrying with guard=%d", n, tail, guard * 2)
        guard *= 2

    with localcontext() as ctx:
        ctx.prec = prec
        ctx.rounding = ROUND_DOWN
        return str(pi.quantize(Decimal(1).scaleb(-n)))
