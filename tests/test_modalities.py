from app.services import modalities
from app.services.modalities import get_modality, next_modality, normalize_lang, system_prompt


def test_unknown_modality_falls_back_to_person_centered():
    assert get_modality("gestalt").key == "pct"
    assert get_modality(None).key == "pct"
    assert get_modality("dbt").short == "DBT"


def test_rotation_wraps_around():
    keys = [m.key for m in modalities.MODALITIES]
    assert keys == ["pct", "eft", "cbt", "dbt", "sfbt", "psychodynamic", "act"]
    assert next_modality("pct") == "eft"
    assert next_modality("act") == "pct"
    assert next_modality("nonsense") == "eft"


def test_lang_defaults_to_english():
    assert normalize_lang("zh") == "zh"
    assert normalize_lang("fr") == "en"
    assert normalize_lang(None) == "en"


def test_system_prompt_english():
    prompt = system_prompt("cbt", "en")
    lines = prompt.split("\n")
    assert lines[0] == "Respond in English."
    assert lines[1].startswith("You are Credibot, a therapy-prep assistant. Use CBT style")
    assert "988 (US)" in lines[2]
    assert lines[2].endswith("End with ONE concise question that helps the user continue.")


def test_system_prompt_chinese_uses_chinese_rules():
    prompt = system_prompt("act", "zh")
    assert prompt.startswith("Respond in Simplified Chinese.")
    assert "Use ACT style" in prompt
    assert "不要声称提供诊断或治疗" in prompt


def test_catalog_is_serialisable():
    catalog = modalities.list_modalities()
    assert len(catalog) == 7
    assert set(catalog[0]) == {"key", "name", "short", "style"}


def test_greeting_mentions_crisis_line():
    assert "988" in modalities.initial_message("en")
    assert "988" in modalities.initial_message("zh")


def test_non_string_modality_falls_back():
    assert get_modality(["cbt"]).key == "pct"
    assert get_modality({"k": 1}).key == "pct"
    assert next_modality(7) == "eft"
