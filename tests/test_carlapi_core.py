# -*- coding: utf-8 -*-
import json
from pathlib import Path

import pytest

from carlapi_core import (
    CatalogLoadError,
    CatalogNotFound,
    CatalogParseError,
    ParameterDescriptor,
    catalog_info,
    load_catalog,
    parse_catalog,
    parse_signature,
)

SAMPLE = {
    "classes": {
        "Actor": {
            "docstring": "Anything that plays a role in the simulation.",
            "base_classes": [],
            "methods": {"destroy": {"signature": "destroy(self)", "docstring": "Destroys the actor."}},
            "properties": {"id": {"docstring": "Identifier.", "readable": True, "writable": False}},
        },
        "Vehicle": {
            "docstring": "A vehicle.",
            "base_classes": ["Actor"],
            "methods": {},
            "properties": {},
        },
    }
}

# --- parse_signature ------------------------------------------------------

def test_assinatura_tipada_com_default():
    assert parse_signature("name(a: T1 = d1, b: T2)") == [
        ParameterDescriptor("a", "T1", "d1"),
        ParameterDescriptor("b", "T2", None),
    ]

def test_spawn_actor_descarta_self_e_mantem_default_com_parenteses():
    params = parse_signature(
        "spawn_actor(self, blueprint: ActorBlueprint, transform: Transform = Transform())"
    )
    assert params == [
        ParameterDescriptor("blueprint", "ActorBlueprint"),
        ParameterDescriptor("transform", "Transform", "Transform()"),
    ]

def test_self_fora_da_primeira_posicao_tambem_sai():
    assert parse_signature("f(a, self)") == [ParameterDescriptor("a")]

def test_self_anotado_sai():
    assert parse_signature("f(self: Actor, a)") == [ParameterDescriptor("a")]

def test_nome_que_contem_self_fica():
    assert [p.name for p in parse_signature("f(self, self_driving: bool)")] == ["self_driving"]

@pytest.mark.parametrize("raw", ["foo()", "foo", "", "foo(self)", "foo(  ,  )", "foo(a"])
def test_sem_parametros(raw):
    assert parse_signature(raw) == []

def test_sem_tipo_com_default():
    assert parse_signature("set_autopilot(self, enabled=True, port = 8000)") == [
        ParameterDescriptor("enabled", None, "True"),
        ParameterDescriptor("port", None, "8000"),
    ]

def test_default_com_igual_fica_inteiro_no_fallback():
    assert parse_signature("f(a=b=c)") == [ParameterDescriptor("a", None, "b=c")]

def test_anotacao_quebrada_usa_so_o_nome():
    assert parse_signature("f(a:, b)") == [ParameterDescriptor("a"), ParameterDescriptor("b")]

def test_ordem_preservada():
    names = [p.name for p in parse_signature("f(self, z, y: int, x=1)")]
    assert names == ["z", "y", "x"]

def test_virgula_aninhada_divide_ingenuamente():
    # comportamento conhecido: o split não olha colchetes
    params = parse_signature("f(self, mapping: Dict[str, int] = {})")
    assert params == [
        ParameterDescriptor("mapping", "Dict[str"),
        ParameterDescriptor("int]", None, "{}"),
    ]

def test_to_dict_omite_campos_vazios():
    assert ParameterDescriptor("a").to_dict() == {"name": "a"}
    assert ParameterDescriptor("a", "int", "1").to_dict() == {"name": "a", "type": "int", "default": "1"}

# --- load_catalog ---------------------------------------------------------

def test_carrega_catalogo(tmp_path):
    p = tmp_path / "carla_api.json"
    p.write_text(json.dumps(SAMPLE), encoding="utf-8")
    cat = load_catalog(p)
    assert set(cat) == {"Actor", "Vehicle"}
    actor = cat["Actor"]
    assert actor.methods["destroy"].signature == "destroy(self)"
    assert actor.properties["id"].readable is True
    assert actor.properties["id"].writable is False
    assert cat["Vehicle"].base_classes == ("Actor",)

def test_catalogo_e_somente_leitura(tmp_path):
    cat = parse_catalog(SAMPLE)
    with pytest.raises(TypeError):
        cat["Nova"] = cat["Actor"]  # type: ignore[index]

def test_arquivo_inexistente(tmp_path):
    with pytest.raises(CatalogNotFound) as exc:
        load_catalog(tmp_path / "nao_existe.json")
    assert isinstance(exc.value, CatalogLoadError)
    assert exc.value.path == tmp_path / "nao_existe.json"

def test_json_invalido(tmp_path):
    p = tmp_path / "ruim.json"
    p.write_text("{classes:", encoding="utf-8")
    with pytest.raises(CatalogParseError):
        load_catalog(p)

def test_formato_errado_vira_parse_error(tmp_path):
    p = tmp_path / "ruim.json"
    p.write_text(json.dumps({"classes": {"Actor": {"methods": []}}}), encoding="utf-8")
    with pytest.raises(CatalogParseError) as exc:
        load_catalog(p)
    assert "classes.Actor.methods" in str(exc.value)
    assert exc.value.path == p

@pytest.mark.parametrize("doc", [
    [],
    {},
    {"clases": {"Actor": {}}},
    {"classes": []},
    {"classes": {"Actor": "x"}},
    {"classes": {"Actor": {"properties": {"id": {"readable": "sim"}}}}},
    {"classes": {"Actor": {"base_classes": [1]}}},
])
def test_parse_catalog_rejeita_formatos(doc):
    with pytest.raises(CatalogParseError):
        parse_catalog(doc)

def test_campos_ausentes_usam_padrao():
    cat = parse_catalog({"classes": {"Actor": {}}})
    a = cat["Actor"]
    assert a.docstring == ""
    assert a.base_classes == ()
    assert dict(a.methods) == {}
    assert dict(a.properties) == {}

def test_catalog_info():
    assert catalog_info(parse_catalog(SAMPLE)) == {"classes": 2, "methods": 1, "properties": 1}

def test_class_to_dict():
    d = parse_catalog(SAMPLE)["Actor"].to_dict()
    assert d["methods"]["destroy"] == {"signature": "destroy(self)", "docstring": "Destroys the actor."}
    assert d["properties"]["id"] == {"docstring": "Identifier.", "readable": True, "writable": False}

def test_sem_chave_classes_e_parse_error(tmp_path):
    p = tmp_path / "carla_api.json"
    p.write_text(json.dumps({"clases": {"Actor": {}}}), encoding="utf-8")
    with pytest.raises(CatalogParseError) as exc:
        load_catalog(p)
    assert "classes" in str(exc.value)

def test_json_profundo_demais_vira_parse_error(tmp_path):
    p = tmp_path / "fundo.json"
    p.write_text("[" * 200000, encoding="utf-8")
    with pytest.raises(CatalogParseError):
        load_catalog(p)

def test_catalogo_empacotado_carrega():
    cat = load_catalog(Path(__file__).resolve().parents[1] / "utils" / "carla_api.json")
    assert {"Actor", "Vehicle", "World"} <= set(cat)
    assert cat["Vehicle"].base_classes == ("Actor",)
    assert [p.name for p in parse_signature(cat["World"].methods["spawn_actor"].signature)] == [
        "blueprint", "transform", "attach_to",
    ]
