from dataclasses import dataclass
import os
from dotenv import load_dotenv


load_dotenv()


@dataclass(frozen=True)
class Settings:
    default_grade_scale: str = os.getenv("SCHOOLRECORD_GRADE_SCALE", "9").strip()
    range_locale: str = os.getenv("SCHOOLRECORD_RANGE_LOCALE", "en").strip().lower()


settings = Settings()
