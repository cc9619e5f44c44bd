from translate_i18n_ai.i18n.paths import PathMatcher
from translate_i18n_ai.i18n.placeholders import PlaceholderMasker
from translate_i18n_ai.i18n.tree import (
    PluralOutput,
    TreeFlattener,
    TreeRebuilder,
    count_leaves,
)

TREE = {
    "title": "Shop",
    "price": 9.99,
    "inStock": True,
    "discount": None,
    "menu": [
        {"id": "home", "label": "Home"},
        {"id": "cart", "label": "Cart with {{count}}"},
    ],
    "tags": ["new", 3],
    "empty": {},
}


def test_flatten_in_depth_first_order_with_array_indices():
    units, skipped = TreeFlattener().flatten(TREE)

    assert [u.key_path for u in units] == [
        ("title",),
        ("menu", 0, "id"),
        ("menu", 0, "label"),
        ("menu", 1, "id"),
        ("menu", 1, "label"),
        ("tags", 0),
    ]
    assert skipped == []


def test_flatten_masks_when_masker_given():
    units, _ = TreeFlattener(masker=PlaceholderMasker()).flatten(TREE)

    cart = next(u for u in units if u.key_path == ("menu", 1, "label"))
    assert cart.masked_text == "Cart with ⟦0⟧"
    assert cart.source_text == "Cart with {{count}}"
    assert cart.path == "menu.1.label"


def test_flatten_without_masker_sends_raw_text():
    units, _ = TreeFlattener().flatten({"a": "Hi {{name}}"})

    assert units[0].masked_text == "Hi {{name}}"
    assert units[0].placeholders == ()


def test_flatten_reports_skipped_leaves():
    matcher = PathMatcher(skip_paths=["menu.*.id"])
    units, skipped = TreeFlattener(matcher).flatten(TREE)

    assert skipped == [("menu", 0, "id"), ("menu", 1, "id")]
    assert ("menu", 0, "id") not in [u.key_path for u in units]


def test_flatten_tags_plural_keys_only_when_enabled():
    tree = {"items_one": "1 item", "items_other": "{{count}} items"}

    units, _ = TreeFlattener().flatten(tree)
    assert [u.plural_category for u in units] == ["one", "other"]
    assert units[0].plural_stem == "items"

    units, _ = TreeFlattener(enable_pluralization=False).flatten(tree)
    assert [u.plural_category for u in units] == [None, None]


def test_rebuild_preserves_shape_and_non_strings():
    units, skipped = TreeFlattener().flatten(TREE)
    translations = {u.key_path: u.source_text.upper() for u in units}

    rebuilt = TreeRebuilder(set(skipped)).rebuild(TREE, translations)

    assert rebuilt == {
        "title": "SHOP",
        "price": 9.99,
        "inStock": True,
        "discount": None,
        "menu": [
            {"id": "HOME", "label": "HOME"},
            {"id": "CART", "label": "CART WITH {{COUNT}}"},
        ],
        "tags": ["NEW", 3],
        "empty": {},
    }
    assert list(rebuilt) == list(TREE)
    assert TREE["title"] == "Shop"


def test_rebuild_keeps_skipped_leaves_verbatim():
    tree = {"brand": "Acme", "tagline": "Best tools"}
    rebuilt = TreeRebuilder({("brand",)}).rebuild(
        tree, {("brand",): "WRONG", ("tagline",): "Mejores herramientas"}
    )

    assert rebuilt == {"brand": "Acme", "tagline": "Mejores herramientas"}


def test_rebuild_emits_plural_family_once_at_first_member():
    tree = {"before": "a", "items_one": "1 item", "middle": "b", "items_other": "n items"}
    output = PluralOutput(entries=[("items_other", "X")])

    rebuilt = TreeRebuilder().rebuild(
        tree,
        {("before",): "A", ("middle",): "B"},
        {("items_one",): output, ("items_other",): output},
    )

    assert list(rebuilt.items()) == [("before", "A"), ("items_other", "X"), ("middle", "B")]


def test_count_leaves_respects_matcher():
    assert count_leaves(TREE) == 6
    assert count_leaves(TREE, PathMatcher(skip_paths=["menu.*.id"])) == 4
