"""
Silence matching for firing alerts. A silence applies to an alert when the silence is active and every one of its matchers is satisfied by the alert's labels. Matchers resolve their two flags in a fixed order: equality when isEqual is set, otherwise an unanchored regular expression search when isRegex is set. A matcher with neither flag is satisfied by any alert. Malformed regular expressions and missing labels never match, so a broken silence cannot hide an alert.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

import logging
import re
from functools import lru_cache
from typing import Iterable, List, Mapping, Optional, Pattern, Sequence, Tuple

from models.alerting.alerts import ALERTNAME_LABEL, FiringAlert
from models.alerting.silences import Matcher, Silence

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1024)
def _compile(pattern: str) -> Optional[Pattern[str]]:
    try:
        return re.compile(pattern)
    except re.error as exc:
        logger.warning("Ignoring silence matcher with invalid regex %r: %s", pattern, exc)
        return None


def matcher_matches(matcher: Matcher, labels: Mapping[str, str]) -> bool:
    if matcher.is_equal:
        return matcher.name in labels and labels[matcher.name] == matcher.value
    if matcher.is_regex:
        if matcher.name not in labels:
            return False
        compiled = _compile(matcher.value)
        return compiled is not None and compiled.search(labels[matcher.name]) is not None
    return True


def silence_applies(silence: Silence, labels: Mapping[str, str]) -> bool:
    if not silence.is_active:
        return False
    return all(matcher_matches(matcher, labels) for matcher in silence.matchers)


def find_silencing_silence(alert: FiringAlert, silences: Iterable[Silence]) -> Optional[Silence]:
    for silence in silences:
        if silence_applies(silence, alert.labels):
            return silence
    return None


def is_silenced(alert: FiringAlert, silences: Iterable[Silence]) -> bool:
    silence = find_silencing_silence(alert, silences)
    if silence is None:
        return False
    logger.debug("Alert %s silenced by %s", alert.labels.get(ALERTNAME_LABEL), silence.id)
    return True


def partition_alerts(
    alerts: Iterable[FiringAlert],
    silences: Sequence[Silence],
) -> Tuple[List[FiringAlert], List[FiringAlert]]:
    """Split firing alerts into (unsilenced, silenced), preserving source order."""
    unsilenced: List[FiringAlert] = []
    silenced: List[FiringAlert] = []
    for alert in alerts:
        (silenced if is_silenced(alert, silences) else unsilenced).append(alert)
    return unsilenced, silenced
