#!/usr/bin/env python3
"""
Synonym Table - Canonical id lookup for skills, industries, languages and
South African locations.

The table is plain data (YAML) so it can be swapped per deployment. Unknown
free text falls back to its slug, so two identical unknown strings still
resolve to the same id.
"""

import logging
import os
import re
from typing import Any, Dict, List, Optional, Tuple

import yaml

from core.normalizer.models import IndustryRef, LocationBucket

logger = logging.getLogger(__name__)

DEFAULT_SYNONYMS_FILE = os.path.join(os.path.dirname(os.path.abspath(__file__)), 'synonyms.yaml')

_SLUG_STRIP = re.compile(r'[^a-z0-9+#]+')


def slugify(text: str) -> str:
    """Lower-case text and collapse everything except letters, digits, '+' and '#' into '_'."""
    return _SLUG_STRIP.sub('_', str(text).strip().lower()).strip('_')


class SynonymTable:
    """Alias -> canonical id maps built from a synonyms document."""

    def __init__(self, data: Dict[str, Any]):
        self._skills = self._alias_map(data.get('skills') or {})
        self._languages = self._alias_map(data.get('languages') or {})

        self._industries: Dict[str, IndustryRef] = {}
        self._industry_aliases: Dict[str, str] = {}
        for industry_id, entry in (data.get('industries') or {}).items():
            entry = entry or {}
            ref = IndustryRef(id=industry_id, parent=entry.get('parent'), label=entry.get('label'))
            self._industries[industry_id] = ref
            for alias in [industry_id, entry.get('label') or ''] + list(entry.get('aliases') or []):
                if alias:
                    self._industry_aliases[slugify(alias)] = industry_id

        self._countries: Dict[str, str] = {}
        for country_id, entry in (data.get('countries') or {}).items():
            entry = entry or {}
            for alias in [country_id, entry.get('label') or ''] + list(entry.get('aliases') or []):
                if alias:
                    self._countries[slugify(alias)] = country_id

        # city id -> (province id, country id); alias slug -> province/city id
        self._provinces: Dict[str, str] = {}
        self._province_country: Dict[str, Optional[str]] = {}
        self._cities: Dict[str, Tuple[str, Optional[str]]] = {}
        self._city_aliases: Dict[str, str] = {}
        for province_id, entry in (data.get('provinces') or {}).items():
            entry = entry or {}
            country = entry.get('country')
            self._province_country[province_id] = country
            for alias in [province_id, entry.get('label') or ''] + list(entry.get('aliases') or []):
                if alias:
                    self._provinces[slugify(alias)] = province_id
            for city in entry.get('cities') or []:
                city_id = slugify(city)
                self._cities[city_id] = (province_id, country)
                self._city_aliases[city_id] = city_id

        for city_id, aliases in (data.get('city_aliases') or {}).items():
            for alias in aliases or []:
                self._city_aliases[slugify(alias)] = city_id

    @staticmethod
    def _alias_map(section: Dict[str, List[str]]) -> Dict[str, str]:
        mapping = {}
        for canonical, aliases in section.items():
            mapping[slugify(canonical)] = canonical
            for alias in aliases or []:
                mapping[slugify(alias)] = canonical
        return mapping

    @classmethod
    def from_yaml(cls, path: str) -> "SynonymTable":
        with open(path, 'r') as f:
            data = yaml.safe_load(f) or {}
        logger.info(f"Loaded synonym table from {path}")
        return cls(data)

    @classmethod
    def default(cls) -> "SynonymTable":
        return cls.from_yaml(DEFAULT_SYNONYMS_FILE)

    def resolve_skill(self, raw: str) -> str:
        slug = slugify(raw)
        return self._skills.get(slug, slug)

    def resolve_language(self, raw: str) -> str:
        slug = slugify(raw)
        return self._languages.get(slug, slug)

    def resolve_industry(self, raw: Optional[str]) -> Optional[IndustryRef]:
        if raw is None or not str(raw).strip():
            return None
        slug = slugify(raw)
        industry_id = self._industry_aliases.get(slug)
        if industry_id is None:
            return IndustryRef(id=slug, parent=None, label=str(raw).strip())
        return self._industries[industry_id]

    def resolve_location(self, raw: Optional[str]) -> Optional[LocationBucket]:
        """Resolve "City, Province, Country" style text to a bucket.

        Tokens are tried most-specific first: any city wins over a province,
        which wins over a country.
        """
        if raw is None or not str(raw).strip():
            return None

        tokens = [slugify(t) for t in str(raw).split(',')]
        tokens = [t for t in tokens if t and t != 'remote']
        if not tokens:
            return None

        for token in tokens:
            city_id = self._city_aliases.get(token)
            if city_id:
                province, country = self._cities[city_id]
                return LocationBucket(city=city_id, province=province, country=country)

        for token in tokens:
            province = self._provinces.get(token)
            if province:
                return LocationBucket(province=province, country=self._province_country.get(province))

        for token in tokens:
            country = self._countries.get(token)
            if country:
                return LocationBucket(country=country)

        return LocationBucket(city=tokens[0])
