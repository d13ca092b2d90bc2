# !!!
# TO RUN THE SERVER: uvicorn app:app --host 0.0.0.0 --port 8000
# !!!

from __future__ import annotations

import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional

from fastapi import FastAPI, File, Form, HTTPException, UploadFile
from fastapi.responses import JSONResponse

from audiohash.comparer import AudioHashComparer
from audiohash.log import log_detail, log_section, log_step, log_success, setup_logging
from config_app import ALLOWED_SUFFIXES, BLOCK_SIZE, THRESHOLD, TRANSFORM

log = setup_logging()

# -----------------------------
# App Initialization
# -----------------------------

log_section("🎵 AudioHash API Server")

app = FastAPI(title="AudioHash API", version="1.0")

log_step(1, "Initializing comparer...")
comparer = AudioHashComparer(threshold=THRESHOLD, block_size=BLOCK_SIZE, transform=TRANSFORM)
log_detail("Threshold", str(THRESHOLD))
log_detail("Block size", str(BLOCK_SIZE))
log_detail("Transform", comparer.transform.name)
log_success("Comparer ready")


@dataclass
class CompareResult:
    matched: bool
    offset1: Optional[int]
    offset2: Optional[int]
    bit_error_rate: Optional[float]
    subfingerprints1: int
    subfingerprints2: int


def run_comparison(original_path: str, recording_path: str,
                   threshold: float, block_size: int) -> CompareResult:
    if not 0.0 <= threshold <= 1.0:
        raise HTTPException(status_code=400, detail="threshold must be within [0, 1]")
    if block_size < 1:
        raise HTTPException(status_code=400, detail="block_size must be at least 1")

    request_comparer = comparer
    if threshold != comparer.threshold or block_size != comparer.block_size:
        request_comparer = AudioHashComparer(params=comparer.params, threshold=threshold,
                                             block_size=block_size, transform=comparer.transform)

    result, metadata = request_comparer.compare_files(Path(original_path), Path(recording_path))

    if result.matched:
        log_success(f"Recordings are equal (BER: {result.bit_error_rate:.2%})")
    else:
        log.warning("Recordings are not equal")

    return CompareResult(
        matched=result.matched,
        offset1=result.offset1,
        offset2=result.offset2,
        bit_error_rate=result.bit_error_rate,
        subfingerprints1=metadata["num_subfingerprints_1"],
        subfingerprints2=metadata["num_subfingerprints_2"],
    )


async def _save_upload(file: UploadFile) -> str:
    filename = (file.filename or "").lower()
    suffix = Path(filename).suffix
    if suffix not in ALLOWED_SUFFIXES:
        log.warning(f"Invalid file format: {file.filename}")
        raise HTTPException(status_code=400, detail=f"Unsupported audio format '{suffix}'.")

    content = await file.read()
    if not content:
        log.warning("Empty file upload rejected")
        raise HTTPException(status_code=400, detail="Empty upload.")

    with tempfile.NamedTemporaryFile(delete=False, suffix=suffix) as tmp:
        tmp.write(content)
    log_detail("File size", f"{len(content) / 1024:.1f} KB")
    return tmp.name


# -----------------------------
# API endpoints
# -----------------------------
@app.get("/health")
def health() -> Dict[str, str]:
    log.debug("Health check requested")
    return {"status": "ok"}


@app.post("/compare")
async def compare(
    original: UploadFile = File(...),
    recording: UploadFile = File(...),
    threshold: float = Form(THRESHOLD),
    block_size: int = Form(BLOCK_SIZE),
) -> JSONResponse:
    log.info("🎧 New comparison request received")
    log_detail("Original", original.filename or "unknown")
    log_detail("Recording", recording.filename or "unknown")

    tmp_paths = []
    try:
        tmp_paths.append(await _save_upload(original))
        tmp_paths.append(await _save_upload(recording))

        result = run_comparison(tmp_paths[0], tmp_paths[1], threshold, block_size)

        log.info("✨ Request completed successfully")
        return JSONResponse(
            {
                "matched": result.matched,
                "offset1": result.offset1,
                "offset2": result.offset2,
                "bit_error_rate": result.bit_error_rate,
                "subfingerprints1": result.subfingerprints1,
                "subfingerprints2": result.subfingerprints2,
            }
        )
    except HTTPException:
        raise
    except RuntimeError as e:
        # soundfile raises LibsndfileError (a RuntimeError) for undecodable audio
        log.warning(f"Could not decode upload: {e}")
        raise HTTPException(status_code=400, detail="Could not decode audio file.")
    except Exception as e:
        log.error(f"Comparison failed: {e}")
        raise
    finally:
        for tmp_path in tmp_paths:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
                log.debug("Temporary file cleaned up")
