from dataclasses import dataclass
from typing import Protocol, runtime_checkable

import pandas as pd

from signalgate.errors import InvariantViolation
from signalgate.labels import Label


@dataclass(frozen=True)
class IndicatorReading:
    """Latest value of one technical metric, labelled.

    Computed fresh on every analysis pass; never mutated.
    """

    name: str
    value: float
    label: Label
    strength: float  # 0–100
    description: str = ""

    def __post_init__(self) -> None:
        if not 0.0 <= self.strength <= 100.0:
            raise InvariantViolation(
                f"{self.name}: strength {self.strength} outside [0, 100]"
            )


@runtime_checkable
class Indicator(Protocol):
    name: str
    lookback: int

    def compute(self, ohlcv: pd.DataFrame) -> pd.DataFrame:
        """
        Computes the indicator values.

        Args:
            ohlcv: A DataFrame containing OHLCV data.

        Returns:
            A DataFrame with the computed indicator values. The index must match the input index.
        """
        ...


@runtime_checkable
class LabelledIndicator(Indicator, Protocol):

    def evaluate(self, ohlcv: pd.DataFrame) -> IndicatorReading:
        """
        Labels the most recent indicator value.

        Args:
            ohlcv: A DataFrame containing OHLCV data, oldest row first.

        Returns:
            An IndicatorReading for the last bar.

        Raises:
            InsufficientDataError: If ``ohlcv`` has fewer than ``lookback`` rows.
        """
        ...


def validate_ohlcv(df: pd.DataFrame) -> None:
    """
    Validates that the input DataFrame contains the required OHLCV columns.

    Args:
        df: Input DataFrame.

    Raises:
        ValueError: If required columns are missing.
    """
    required_columns = {"open", "high", "low", "close", "volume"}
    if not required_columns.issubset(df.columns):
        missing = required_columns - set(df.columns)
        raise ValueError(f"Input DataFrame missing required columns: {missing}")
