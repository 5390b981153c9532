"""Shared fixtures for pipeline tests."""

from __future__ import annotations

import pandas as pd
import pytest

from tests.factories import make_frame, make_record


@pytest.fixture
def raw_frame() -> pd.DataFrame:
    """A small raw dataset exercising every cleaning rule."""
    return make_frame(
        [
            make_record(company=" Airbnb", industry="", total_laid_off="1900", date="5/5/2020"),
            make_record(company="Airbnb", industry="Travel", total_laid_off="30", date="11/8/2022"),
            make_record(company="Coinbase", industry="Crypto Currency", date="6/14/2022"),
            make_record(company="Coinbase", industry="CryptoCurrency", date="1/10/2023"),
            make_record(company="Juul", industry=None, country="United States.", date="11/10/2022"),
            make_record(company="Ghost", industry=None, total_laid_off=None, percentage_laid_off=None),
            make_record(company="Dup", date="1/1/2021"),
            make_record(company="Dup", date="1/1/2021"),
            make_record(company="Dup", date="1/1/2021"),
        ]
    )
