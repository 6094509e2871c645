from __future__ import annotations

from app.negotiation.extraction import extract_discount_amount, extract_time_amount


def test_discount_percent_extraction():
    assert extract_discount_amount("Quiero un 30% de descuento") == 30
    assert extract_discount_amount("un 25 % por favor") == 25
    assert extract_discount_amount("entre 10% y 20%") == 10


def test_months_extraction():
    assert extract_time_amount("Necesito 6 meses") == 6
    assert extract_time_amount("solo 1 mes") == 1
    assert extract_time_amount("PAGO EN 12 MESES") == 12


def test_missing_amounts_are_zero():
    assert extract_discount_amount("un descuento grande") == 0
    assert extract_time_amount("más tiempo") == 0
    assert extract_discount_amount(None) == 0
    assert extract_time_amount("") == 0
