# -*- coding: utf-8 -*-
"""
Unit-of-measure conversion to pieces.

Defective quantities reported in millilitres, metres or square metres are
converted to pieces using the per-piece size found in the material
description ("600 ML", "L6100MM", "W1000MM H2000MM").
"""

import re
from dataclasses import dataclass
from typing import List, Optional, Tuple

from qos_et.models.complaint import UnitConversion

ML_UNITS = ("ML",)
LENGTH_UNITS = ("M", "METER", "METERS")
AREA_UNITS = ("M2", "M²", "SQ M", "SQ M2")

_BOTTLE_PATTERNS = [
    re.compile(r"(\d+(?:\.\d+)?)\s*ml", re.IGNORECASE),
]

# (pattern, divisor to metres)
_LENGTH_PATTERNS: List[Tuple["re.Pattern", float]] = [
    (re.compile(r"L\s*(\d+(?:\.\d+)?)\s*MM", re.IGNORECASE), 1000.0),
    (re.compile(r"L\s*(\d+(?:\.\d+)?)\s*M\b", re.IGNORECASE), 1.0),
    (re.compile(r"LENGTH\s*(\d+(?:\.\d+)?)\s*MM", re.IGNORECASE), 1000.0),
    (re.compile(r"LEN\s*(\d+(?:\.\d+)?)\s*MM", re.IGNORECASE), 1000.0),
    (re.compile(r"L\s*(\d{3,})\b", re.IGNORECASE), 1000.0),  # bare 3+ digits are mm
]

_AREA_PATTERNS = [
    re.compile(r"W\s*(\d+(?:\.\d+)?)\s*MM\s*H\s*(\d+(?:\.\d+)?)\s*MM", re.IGNORECASE),
    re.compile(r"WIDTH\s*(\d+(?:\.\d+)?)\s*MM\s*HEIGHT\s*(\d+(?:\.\d+)?)\s*MM", re.IGNORECASE),
    re.compile(r"(\d+(?:\.\d+)?)\s*MM\s*x\s*(\d+(?:\.\d+)?)\s*MM", re.IGNORECASE),
    re.compile(r"(\d+(?:\.\d+)?)\s*x\s*(\d+(?:\.\d+)?)\s*MM", re.IGNORECASE),
]


@dataclass
class ConversionOutcome:
    """Converted quantity; ``error`` is set when the size could not be found."""
    converted_value: float
    error: Optional[str] = None
    bottle_size: Optional[float] = None
    length_per_piece: Optional[float] = None
    area_per_piece: Optional[float] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def extract_bottle_size(description: Optional[str]) -> Optional[float]:
    """Bottle size in ml, e.g. 600 from "WATER 600 ML"."""
    if not description:
        return None
    for pattern in _BOTTLE_PATTERNS:
        match = pattern.search(description)
        if match:
            size = float(match.group(1))
            if size > 0:
                return size
    return None


def extract_length(description: Optional[str]) -> Optional[float]:
    """Length per piece in metres."""
    if not description:
        return None
    for pattern, divisor in _LENGTH_PATTERNS:
        match = pattern.search(description)
        if match:
            length = float(match.group(1))
            if length > 0:
                return length / divisor
    return None


def extract_area(description: Optional[str]) -> Optional[float]:
    """Area per piece in square metres from width and height in mm."""
    if not description:
        return None
    for pattern in _AREA_PATTERNS:
        match = pattern.search(description)
        if match:
            width, height = float(match.group(1)), float(match.group(2))
            if width > 0 and height > 0:
                return (width / 1000.0) * (height / 1000.0)
    return None


def _pieces(quantity: float, per_piece: float) -> float:
    return round(quantity / per_piece, 2)


def convert_to_pieces(quantity: float, unit_of_measure: Optional[str],
                      material_description: Optional[str]) -> Optional[ConversionOutcome]:
    """
    Convert a defective quantity to pieces.

    Returns:
        None for unsupported units or a non-positive quantity. Otherwise a
        ConversionOutcome; when the per-piece size is missing from the
        description, the quantity is returned unchanged with an error.
    """
    if not unit_of_measure or quantity is None or quantity <= 0:
        return None

    unit = unit_of_measure.strip().upper()

    if unit in ML_UNITS:
        size = extract_bottle_size(material_description)
        if not size:
            return ConversionOutcome(
                converted_value=quantity,
                error='Could not extract bottle size from material description. '
                      'Please include bottle size (e.g., "600 ML").',
            )
        return ConversionOutcome(converted_value=_pieces(quantity, size), bottle_size=size)

    if unit in LENGTH_UNITS:
        length = extract_length(material_description)
        if not length:
            return ConversionOutcome(
                converted_value=quantity,
                error='Could not extract length per piece from material description. '
                      'Please include length (e.g., "L6100MM").',
            )
        return ConversionOutcome(converted_value=_pieces(quantity, length), length_per_piece=length)

    if unit in AREA_UNITS:
        area = extract_area(material_description)
        if not area:
            return ConversionOutcome(
                converted_value=quantity,
                error='Could not extract area per piece from material description. '
                      'Please include dimensions (e.g., "W1000MM H2000MM").',
            )
        return ConversionOutcome(converted_value=_pieces(quantity, area), area_per_piece=area)

    return None


def build_unit_conversion(quantity: float, unit_of_measure: Optional[str],
                          material_description: Optional[str]) -> Optional[UnitConversion]:
    """
    Conversion record to store on a complaint, or None when nothing applies.

    A failed extraction still yields a record with ``was_converted=False`` so
    the original quantity and unit stay visible.
    """
    outcome = convert_to_pieces(quantity, unit_of_measure, material_description)
    if outcome is None:
        return None

    return UnitConversion(
        original_value=quantity,
        original_unit=unit_of_measure.strip().upper(),
        converted_value=outcome.converted_value,
        was_converted=outcome.ok,
        bottle_size=outcome.bottle_size,
        length_per_piece=outcome.length_per_piece,
        area_per_piece=outcome.area_per_piece,
        material_description=material_description,
    )
