from typing import Iterable, List, Tuple

RISK_LEVELS = range(0, 5)


def build_heatmap(findings: Iterable) -> List[Tuple[int, int]]:
    """
    Count findings per risk level (0..4). Every level is present, empty ones with 0.
    """
    risk_counts = {level: 0 for level in RISK_LEVELS}

    for finding in findings:
        if finding.risk in risk_counts:
            risk_counts[finding.risk] += 1

    return [(level, risk_counts[level]) for level in RISK_LEVELS]
