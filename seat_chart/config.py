import os
from pathlib import Path

DEFAULT_ROWS = 6
DEFAULT_COLS = 6

DEFAULT_OFFICER_TAGS = (
    "班長", "副班", "學藝", "副學", "衛生", "環保", "資源",
    "風紀", "總務", "輔導", "設備", "安全", "體育", "圖書",
)
DEFAULT_TEACHER_TAGS = (
    "國文", "英文", "數學", "歷史", "地理", "公民", "物理",
    "化學", "生物", "地科", "音樂", "美術", "家政", "國防",
)

# appended to a subject name to mark a subject helper title
TEACHER_SUFFIX = "小老師"

SNAPSHOT_VERSION = "1.0"
DEFAULT_FILE_STEM = "座位表"

EXPORT_DIR = Path(os.environ.get("SEAT_CHART_EXPORT_DIR", "exports"))
LOG_LEVEL = os.environ.get("SEAT_CHART_LOG_LEVEL", "INFO").upper()
