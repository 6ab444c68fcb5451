from __future__ import annotations

from dataclasses import FrozenInstanceError, fields

import pytest

from masterdata_import.models.field_definition import FIELD_KEYS
from masterdata_import.models.master_record import KEY_TO_ATTR, MasterDataRecord


def test_attributes_follow_canonical_keys():
    assert list(KEY_TO_ATTR) == list(FIELD_KEYS)
    assert list(KEY_TO_ATTR.values()) == [f.name for f in fields(MasterDataRecord)]
    assert KEY_TO_ATTR["srNo"] == "sr_no"
    assert KEY_TO_ATTR["minInsulationRes"] == "min_insulation_res"
    assert KEY_TO_ATTR["maxRPM"] == "max_rpm"


def test_from_mapping_and_to_dict():
    record = MasterDataRecord.from_mapping({"srNo": 3, "model": "BLDC", "minRPM": 1200})
    assert record.sr_no == 3
    assert record.min_rpm == 1200
    assert record.value("minRPM") == 1200
    out = record.to_dict()
    assert list(out) == list(FIELD_KEYS)
    assert out["maxVoltage"] is None


def test_merged_keeps_other_fields():
    record = MasterDataRecord(sr_no=1, model="A", phase=1)
    edited = record.merged({"model": "B", "phase": None})
    assert (edited.sr_no, edited.model, edited.phase) == (1, "B", None)
    assert record.model == "A"


def test_unknown_keys_rejected():
    with pytest.raises(KeyError):
        MasterDataRecord.from_mapping({"model": "A", "remarks": "x"})
    with pytest.raises(KeyError):
        MasterDataRecord().merged({"irValue": 1})


def test_frozen():
    with pytest.raises(FrozenInstanceError):
        MasterDataRecord().model = "x"  # type: ignore[misc]
