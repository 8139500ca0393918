"""Structured warning classes for the :mod:`popsynth` package."""
from __future__ import annotations


class PopSynthWarning(UserWarning):
    """Base warning class for popsynth."""


class RowDataWarning(PopSynthWarning):
    """Grid record value defaulted, ignored or derived."""


class RegimeUnsetWarning(PopSynthWarning):
    """Accretion regime not set when a shell update was requested."""


class SamplingWarning(PopSynthWarning):
    """Initial-condition or sampling-control warnings."""


class OutputWarning(PopSynthWarning):
    """Output file handling warnings."""


__all__ = [
    "PopSynthWarning",
    "RowDataWarning",
    "RegimeUnsetWarning",
    "SamplingWarning",
    "OutputWarning",
]
