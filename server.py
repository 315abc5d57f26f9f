import os, time, logging
from typing import Optional, Dict
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Query, status
from fastapi.responses import Response, PlainTextResponse
from pydantic import BaseModel
import uvicorn

import kmp_search
import chudnovsky
from pages import open_pages, SourceUnavailable

DATA_DIR = os.environ.get("PI_DATA_DIR", os.path.join(os.path.dirname(__file__), "data"))
ROOT_PATH = os.environ.get("ROOT_PATH", "")  # nginxのprefixに合わせる
MAX_DIGITS = int(os.environ.get("PI_MAX_DIGITS", "100000"))
PAGE_SIZE = int(os.environ.get("PI_PAGE_SIZE", "4096"))  # テキスト版データセットの1ページの文字数
EARLY_TERMINATION = os.environ.get("PI_EARLY_TERMINATION", "1").lower() not in ("0", "false", "no")
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
HOST = os.environ.get("HOST", "127.0.0.1")
PORT = int(os.environ.get("PORT", "8099"))

# dataset 名 -> ファイル名（拡張子なし）。.pdf を優先し、無ければ .txt
DATASETS = {
    "1M": "pi_1m",  # 100万桁
    "1B": "pi_1b",  # 10億桁
}
DEFAULT_DATASET = "1M"

logging.basicConfig(level=LOG_LEVEL)
log = logging.getLogger(__name__)


def dataset_path(dataset: str) -> Optional[str]:
    """
    dataset 名からファイルパスを返す。未知の名前は 1M 扱い（大文字小文字は区別しない）。
    どちらの形式も無ければ None。
    """
    name = DATASETS["1B"] if dataset.upper() == "1B" else DATASETS[DEFAULT_DATASET]
    for ext in (".pdf", ".txt"):
        path = os.path.join(DATA_DIR, name + ext)
        if os.path.exists(path):
            return path
    return None


def dataset_state() -> Dict[str, bool]:
    return {key: dataset_path(key) is not None for key in DATASETS}


@asynccontextmanager
async def lifespan(app: FastAPI):
    # startup 相当
    for key, ok in dataset_state().items():
        if ok:
            log.info("dataset %s: %s", key, dataset_path(key))
        else:
            log.warning("dataset %s missing in %s", key, DATA_DIR)
    yield


app = FastAPI(
    lifespan=lifespan,
    root_path=ROOT_PATH
)


class SearchOut(BaseModel):
    query: str
    dataset: str
    found: bool
    index: Optional[int] = None
    message: str


class GenerateOut(BaseModel):
    digits: int
    value: str


@app.get("/pi/search", response_model=SearchOut)
def search_in_pi(
        query: str = Query(..., min_length=1, pattern=r"^[0-9.]+$"),
        dataset: str = DEFAULT_DATASET,
        keep_point: bool = False,
        strict: bool = False):
    """
    π の桁列から query の最初の出現位置（0始まり）を探す。
    strict=true で見積もりによる打ち切りを無効にして全ページを走査する。
    """
    if "." in query and not keep_point:
        raise HTTPException(400, "query contains '.', use keep_point=true")

    path = dataset_path(dataset)
    if path is None:
        raise HTTPException(status.HTTP_503_SERVICE_UNAVAILABLE, f"dataset {dataset} unavailable")

    early = EARLY_TERMINATION and not strict
    started = time.time()
    try:
        with open_pages(path, keep_point=keep_point, page_size=PAGE_SIZE) as pages:
            index = kmp_search.search(query, pages, early_termination=early)
    except SourceUnavailable as e:
        log.error("search %s in %s failed: %s", query, path, e)
        raise HTTPException(status.HTTP_503_SERVICE_UNAVAILABLE, str(e))

    log.info("search query=%s dataset=%s index=%s (%.2fs)", query, dataset, index, time.time() - started)
    if index is None:
        return SearchOut(query=query, dataset=dataset, found=False, message="Not Found")
    return SearchOut(query=query, dataset=dataset, found=True, index=index,
                     message=f"Found at index: {index}")


@app.get("/pi/generate", response_model=GenerateOut)
def generate_pi(number: int):
    if number <= 0:
        raise HTTPException(400, f"number must be positive, got {number}")
    if number > MAX_DIGITS:
        raise HTTPException(400, f"number must be <= {MAX_DIGITS}, got {number}")

    started = time.time()
    value = chudnovsky.generate_digits(number)
    log.info("generate number=%d (%.2fs)", number, time.time() - started)
    return GenerateOut(digits=number, value=value)


@app.get("/ping", response_class=PlainTextResponse)
def ping():
    return "pong"


@app.get("/healthz")
def healthz():
    datasets = dataset_state()
    if any(datasets.values()):
        return {
            "status": "ok",
            "datasets": datasets,
            "time": int(time.time())
        }
    return Response(
        content='{"status":"ng","datasets":"missing"}',
        media_type="application/json",
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
    )


def main():
    uvicorn.run(app, host=HOST, port=PORT, log_level=LOG_LEVEL.lower())


if __name__ == "__main__":
    main()
