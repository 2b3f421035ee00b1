"""Detector Pipeline for running detectors and combining their flags."""

from typing import Dict, List, Sequence, Tuple
import pandas as pd

from .methods.base import BaseDetector


class DetectorPipeline:
    """
    Pipeline for combining boolean flags from multiple detectors.

    Supports logical OR (flag if any detector flags) and AND (flag only if all
    detectors flag) combinations.
    """

    def __init__(self, logic: str = "OR") -> None:
        """
        Initialize with combination logic.

        Args:
            logic: "OR" or "AND".

        Raises:
            KeyError: If logic is not supported.
        """
        supported = ["OR", "AND"]
        if logic not in supported:
            raise KeyError(f"Unsupported combination logic '{logic}'")
        self.logic = logic

    def combine_flags(
        self, flags_list: List[Dict[str, pd.Series]]
    ) -> Dict[str, pd.Series]:
        """
        Combine flags from multiple detectors.

        A name missing from one detector's output counts as unflagged there.

        Args:
            flags_list: List of dicts from detectors, each with name to Series.

        Returns:
            Combined dict of Series.
        """
        flags_list = [flags for flags in flags_list if flags]
        if not flags_list:
            return {}

        all_names: List[str] = []
        for flags in flags_list:
            all_names.extend(name for name in flags if name not in all_names)

        index = next(iter(flags_list[0].values())).index
        combined = {}
        for name in all_names:
            series_list = [
                flags.get(name, pd.Series(False, index=index)) for flags in flags_list
            ]
            frame = pd.concat(series_list, axis=1)
            merged = frame.any(axis=1) if self.logic == "OR" else frame.all(axis=1)
            combined[name] = merged.rename(name)
        return combined

    def run(
        self,
        df: pd.DataFrame,
        steps: Sequence[Tuple[BaseDetector, List[str]]],
    ) -> Dict[str, pd.Series]:
        """
        Run each detector on its columns and combine the results.

        Args:
            df: Child records.
            steps: (detector, columns) pairs.

        Returns:
            Combined flags per column/measure name.
        """
        return self.combine_flags([detector.detect(df, columns) for detector, columns in steps])

    def flag_any(self, df: pd.DataFrame, steps: Sequence[Tuple[BaseDetector, List[str]]]) -> pd.Series:
        """Single row-level flag: True where any combined flag is set."""
        combined = self.run(df, steps)
        if not combined:
            return pd.Series(False, index=df.index, dtype=bool)
        return pd.concat(list(combined.values()), axis=1).any(axis=1)
