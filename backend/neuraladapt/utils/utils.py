import re
import time
import uuid
from typing import Optional
from datetime import datetime

SLUG_MAX_LENGTH = 64

def now() -> datetime:
    return datetime.now()

def epoch_millis() -> int:
    return int(time.time() * 1000)

def generate_plan_id() -> str:
    # plan-<epoch ms>-<9 random chars>
    return f"plan-{epoch_millis()}-{uuid.uuid4().hex[:9]}"

def slugify(value: str) -> str:
    """Lowercase, collapse non-alphanumeric runs to '-', trim dashes, cap the length."""
    slug = re.sub(r"[^a-z0-9]+", "-", (value or "").lower())
    return slug.strip("-")[:SLUG_MAX_LENGTH]

def make_artifact_id(program_name: str, millis: Optional[int] = None) -> str:
    stamp = millis if millis is not None else epoch_millis()
    return f"{stamp}-{slugify(program_name)}"
