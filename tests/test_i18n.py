"""Label lookup for rendered values."""

from skyquery.i18n import LANGUAGES, PHASE_KEYS, t


class TestLabels:
    def test_every_phase_named_in_every_language(self):
        for lang in LANGUAGES:
            for key in PHASE_KEYS:
                assert t(key, lang) != key

    def test_korean(self):
        assert t("phase_full", "ko") == "보름달"

    def test_unknown_language_reads_as_english(self):
        assert t("phase_new", "fr") == t("phase_new", "en") == "New"

    def test_unknown_key_shown_as_is(self):
        assert t("no_such_label", "ko") == "no_such_label"
