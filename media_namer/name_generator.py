# media_namer/name_generator.py

import re
import logging
from typing import Iterable, List, Optional

from .models import BaseInfo, MediaDescription

log = logging.getLogger(__name__)

def uppercase_words(text: str) -> str:
    """Uppercases the first character of every space-delimited word, leaving the rest untouched."""
    result = []
    first = True
    for char in text:
        if first:
            result.append(char.upper())
            first = False
        else:
            result.append(char)
            if char == ' ':
                first = True
    return "".join(result)

def parse_year(text: str) -> Optional[int]:
    try:
        return int(text)
    except (TypeError, ValueError) as e:
        log.warning(f"Could not convert year string '{text}' to number: {e}")
        return None


class NameGenerator:
    """
    Turns raw download names into a BaseInfo search key and turns
    "Title (YYYY[-MM-DD])" strings back into bare MediaDescriptions.
    """

    def __init__(self, trim_patterns: Iterable[str] = ()):
        self.title_regex = re.compile(r"^\s*(?P<name>[a-zA-Z0-9\-\s]+)\s\((?P<date>\d{4}(?:-\d{1,2}-\d{1,2})?)\)$")
        self.pre_normalized_regex = re.compile(r"^\s*(?P<name>[a-zA-Z0-9\-\s]+)\s\((?P<year>\d{4})(?:-\d{1,2}-\d{1,2})?\)$")
        self.special_chars_regex = re.compile(r"[^a-zA-Z0-9\-\s]")
        self.space_merge_regex = re.compile(r"\s+")
        self.year_regex = re.compile(r"\s\d{4}$")
        self.alnum_regex = re.compile(r"[a-zA-Z0-9]")
        self.name_trim_regexes = tuple(re.compile(p) for p in trim_patterns)
        log.debug(f"NameGenerator ready with {len(self.name_trim_regexes)} trim patterns.")

    def generate_base_info(self, name: str) -> BaseInfo:
        pre_normalized = self.pre_normalized_regex.match(name)
        if pre_normalized:
            clean_name = self.space_merge_regex.sub(" ", pre_normalized.group('name')).strip()
            return BaseInfo(clean_name, parse_year(pre_normalized.group('year')))

        for rgx in self.name_trim_regexes:
            match = rgx.search(name)
            # a cut must leave something to search for
            if match and self.alnum_regex.search(name[:match.start()]):
                name = name[:match.start()]

        name = name.replace("&", "and")
        name = self.special_chars_regex.sub(" ", name)
        name = self.space_merge_regex.sub(" ", name).strip()
        name = uppercase_words(name)

        year_match = self.year_regex.search(name)
        if year_match:
            start = year_match.start()
            base = BaseInfo(name[:start], parse_year(name[start + 1:]))
        else:
            base = BaseInfo(name, None)
        log.debug(f"Normalized name -> '{base.formatted()}'")
        return base

    def generate_media_descriptions(self, titles: Iterable[str]) -> List[MediaDescription]:
        descriptions = []
        for title in titles:
            match = self.title_regex.match(title)
            if match:
                descriptions.append(MediaDescription(title=match.group('name'), date=match.group('date')))
            else:
                descriptions.append(MediaDescription(title=title, date=""))
        return descriptions
