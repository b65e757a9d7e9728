import logging

import pytest

from clear_gan.console import batch_end_logger, epoch_end_logger, parse_digit_filter, render_digit_as_text
from clear_gan.model import BatchEndEvent, EpochEndEvent


def test_event_strings():
    assert str(BatchEndEvent(1, 25, 0.123)) == "Epoch 1 Batch 25 Loss 0.123."
    assert str(EpochEndEvent(3, 0.05)) == "Epoch 3 Loss 0.05"


def test_parse_digit_filter(caplog):
    with caplog.at_level(logging.WARNING):
        assert parse_digit_filter("1, 2,x,12,,3") == [1, 2, 3]
    assert "Rejected 'x'." in caplog.messages
    assert "Rejected '12'." in caplog.messages


def test_parse_digit_filter_empty():
    assert parse_digit_filter("") == []
    assert parse_digit_filter(" 9 ") == [9]


def test_parse_digit_filter_custom_range():
    assert parse_digit_filter("0,5,10", min_value=1, max_value=10) == [5, 10]


def test_render_digit_as_text():
    text = render_digit_as_text([0.0, 0.5, 0.95, 1.0], 0.0, 1.0, width=2, height=2)
    assert text == " -\n**"


def test_render_uses_row_width():
    text = render_digit_as_text([-1, -1, -1, 1, 1, 1], -1.0, 1.0, width=3, height=2)
    assert text.split("\n") == ["   ", "***"]


def test_render_defaults_to_data_range():
    assert render_digit_as_text([2.0, 4.0], width=2, height=1) == " *"


def test_render_length_mismatch():
    with pytest.raises(ValueError):
        render_digit_as_text([0.0] * 5, width=2, height=2)


def test_batch_end_logger(caplog):
    listener = batch_end_logger(every=2, logger=logging.getLogger("training"))
    with caplog.at_level(logging.INFO):
        for batch in range(1, 5):
            listener(BatchEndEvent(1, batch, 0.5))
    assert caplog.messages == ["Epoch 1 Batch 2 Loss 0.5.", "Epoch 1 Batch 4 Loss 0.5."]


def test_epoch_end_logger(caplog):
    listener = epoch_end_logger(logging.getLogger("training"))
    with caplog.at_level(logging.INFO):
        listener(EpochEndEvent(2, 0.25))
    assert caplog.messages == ["Epoch 2 Loss 0.25"]
