"""Surah to Juz lookup.

The table maps each of the 114 Surahs to the juz it sits in, or to the ordered
list of juz it spans. Juz boundaries do not align with Surah boundaries and no
ayah-level boundary table is kept, so multi-juz Surahs always resolve to their
first juz.
"""

from __future__ import annotations

import json

from hifz.core.models import MAX_JUZ

SURAH_JUZ_MAPPING: dict[str, int | tuple[int, ...]] = {
    "Al-Fatihah": 1,
    "Al-Baqarah": (1, 2, 3),
    "Al-Imran": (3, 4),
    "An-Nisa": (4, 5, 6),
    "Al-Ma'idah": (6, 7),
    "Al-An'am": (7, 8),
    "Al-A'raf": (8, 9),
    "Al-Anfal": (9, 10),
    "At-Tawbah": (10, 11),
    "Yunus": 11,
    "Hud": (11, 12),
    "Yusuf": (12, 13),
    "Ar-Ra'd": 13,
    "Ibrahim": 13,
    "Al-Hijr": (13, 14),
    "An-Nahl": (14, 15),
    "Al-Isra": (15, 16),
    "Al-Kahf": (15, 16),
    "Maryam": 16,
    "Ta-Ha": (16, 17),
    "Al-Anbiya": 17,
    "Al-Hajj": (17, 18),
    "Al-Mu'minun": 18,
    "An-Nur": 18,
    "Al-Furqan": (18, 19),
    "Ash-Shu'ara": 19,
    "An-Naml": (19, 20),
    "Al-Qasas": (20,),
    "Al-Ankabut": (20, 21),
    "Ar-Rum": 21,
    "Luqman": 21,
    "As-Sajdah": 21,
    "Al-Ahzab": (21, 22),
    "Saba": 22,
    "Fatir": 22,
    "Ya-Sin": (22, 23),
    "As-Saffat": 23,
    "Sad": 23,
    "Az-Zumar": (23, 24),
    "Ghafir": 24,
    "Fussilat": 24,
    "Ash-Shura": (24, 25),
    "Az-Zukhruf": 25,
    "Ad-Dukhan": 25,
    "Al-Jathiyah": 25,
    "Al-Ahqaf": (25, 26),
    "Muhammad": 26,
    "Al-Fath": 26,
    "Al-Hujurat": 26,
    "Qaf": (26, 27),
    "Adh-Dhariyat": 27,
    "At-Tur": 27,
    "An-Najm": 27,
    "Al-Qamar": 27,
    "Ar-Rahman": 27,
    "Al-Waqi'ah": 27,
    "Al-Hadid": (27, 28),
    "Al-Mujadila": 28,
    "Al-Hashr": 28,
    "Al-Mumtahanah": 28,
    "As-Saff": 28,
    "Al-Jumu'ah": 28,
    "Al-Munafiqun": 28,
    "At-Taghabun": 28,
    "At-Talaq": 28,
    "At-Tahrim": 28,
    "Al-Mulk": 29,
    "Al-Qalam": 29,
    "Al-Haqqah": 29,
    "Al-Ma'arij": 29,
    "Nuh": 29,
    "Al-Jinn": 29,
    "Al-Muzzammil": 29,
    "Al-Muddathir": 29,
    "Al-Qiyamah": 29,
    "Al-Insan": 29,
    "Al-Mursalat": 29,
    "An-Naba": 30,
    "An-Nazi'at": 30,
    "Abasa": 30,
    "At-Takwir": 30,
    "Al-Infitar": 30,
    "Al-Mutaffifin": 30,
    "Al-Inshiqaq": 30,
    "Al-Buruj": 30,
    "At-Tariq": 30,
    "Al-A'la": 30,
    "Al-Ghashiyah": 30,
    "Al-Fajr": 30,
    "Al-Balad": 30,
    "Ash-Shams": 30,
    "Al-Lail": 30,
    "Ad-Duha": 30,
    "Ash-Sharh": 30,
    "At-Tin": 30,
    "Al-Alaq": 30,
    "Al-Qadr": 30,
    "Al-Bayyinah": 30,
    "Az-Zalzalah": 30,
    "Al-Adiyat": 30,
    "Al-Qari'ah": 30,
    "At-Takathur": 30,
    "Al-Asr": 30,
    "Al-Humazah": 30,
    "Al-Fil": 30,
    "Quraish": 30,
    "Al-Ma'un": 30,
    "Al-Kawthar": 30,
    "Al-Kafirun": 30,
    "An-Nasr": 30,
    "Al-Masad": 30,
    "Al-Ikhlas": 30,
    "Al-Falaq": 30,
    "An-Nas": 30,
}

# Mushaf order
SURAHS: tuple[str, ...] = tuple(SURAH_JUZ_MAPPING)


def get_surah_juz(surah: str, ayah: int | None = None) -> int | None:
    """Return the juz a Surah belongs to.

    For Surahs spanning several juz the first one is returned. ``ayah`` is
    accepted for call-site compatibility but does not take part in the lookup.

    Returns:
        Juz number, or None for an unknown Surah.
    """
    juz_info = SURAH_JUZ_MAPPING.get(surah)
    if juz_info is None:
        return None
    if isinstance(juz_info, int):
        return juz_info
    return juz_info[0]


def is_juz_completed(surah: str, ayah: int, juz_number: int) -> bool:
    """True if reciting at ``surah``/``ayah`` means ``juz_number`` is behind."""
    surah_juz = get_surah_juz(surah, ayah)
    return surah_juz is not None and surah_juz > juz_number


def parse_completed_juz(value: list[int] | str | None) -> list[int]:
    """Normalize a completed-juz value (list, JSON string or None) to a list."""
    if value is None or value == "":
        return []
    if isinstance(value, str):
        parsed = json.loads(value)
        if not isinstance(parsed, list):
            raise ValueError(f"Completed juz must be a JSON list, got {value!r}")
        return [int(j) for j in parsed]
    return [int(j) for j in value]


def update_completed_juz(
    current: list[int] | str | None,
    surah: str,
    ayah: int,
) -> list[int]:
    """Extend the completed-juz set from the current recitation position.

    The result is sorted, de-duplicated and always a superset of ``current``:
    moving back to an earlier Surah never removes a completed juz.
    """
    completed = set(parse_completed_juz(current))

    current_juz = get_surah_juz(surah, ayah)
    if current_juz is not None:
        for juz in range(1, current_juz + 1):
            if juz not in completed and is_juz_completed(surah, ayah, juz):
                completed.add(juz)

    return sorted(completed)


def calculate_juz_progress(completed_juz: list[int]) -> int:
    """Percentage of the Quran's juz that are completed, rounded half-up."""
    if not completed_juz:
        return 0
    return int(len(set(completed_juz)) * 100 / MAX_JUZ + 0.5)
