from workshop.services import catalog


def test_lookup_known_product_type():
    info = catalog.lookup("карандашница")
    assert info.range_label == "66 BYN"
    assert info.min == 66
    assert info.max == 66


def test_lookup_unknown_product_type_is_not_an_error():
    assert catalog.lookup("космический корабль") is None
    assert catalog.lookup(None) is None
    assert catalog.lookup("") is None


def test_list_product_types_covers_whole_catalog():
    items = catalog.list_product_types()
    assert [i.key for i in items] == list(catalog.PRODUCT_PRICE_MAPPING)
    assert all(i.min <= i.max for i in items)
    clocks = next(i for i in items if i.key == "настенные часы")
    assert (clocks.range_label, clocks.min, clocks.max) == ("165-495 BYN", 165, 495)
