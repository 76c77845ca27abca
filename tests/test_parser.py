import pytest

from todo_planner.parser import PlanParseError, PlanParser
from todo_planner.utils.schemas import PlanStep


def test_direct_json_yields_single_step():
    plan = PlanParser().parse('{"function": "findAll", "description": "list todos"}')
    assert len(plan.steps) == 1
    assert plan.steps[0].function_name == "findAll"
    assert plan.steps[0].description == "list todos"
    assert not plan.steps[0].variables


@pytest.mark.parametrize("key", ["input", "parameters", "variables"])
def test_direct_json_accepts_argument_aliases(key):
    response = '  {"function": "create", "%s": {"text": "buy milk"}}\n' % key
    plan = PlanParser().parse(response)
    assert plan.steps[0].variables == {"text": "buy milk"}


def test_direct_json_ignores_unknown_keys_and_trailing_text():
    response = '{"function": "findAll", "confidence": 0.9} that is all'
    plan = PlanParser().parse(response)
    assert [step.function_name for step in plan.steps] == ["findAll"]


def test_direct_json_malformed_is_fatal():
    with pytest.raises(PlanParseError, match="Unable to parse AI's JSON response"):
        PlanParser().parse('{"function": "create", "input": ')


def test_direct_json_without_function_is_fatal():
    with pytest.raises(PlanParseError):
        PlanParser().parse('{"description": "no tool named"}')


def test_markdown_skips_unparseable_blocks():
    response = (
        "Here is the plan.\n\n"
        "```json\n"
        '{"function": "create", "input": {"text": "buy milk"}}\n'
        "```\n\n"
        "```\n"
        "not json\n"
        "```\n"
    )
    plan = PlanParser().parse(response)
    assert len(plan.steps) == 1
    assert plan.steps[0].function_name == "create"
    assert plan.steps[0].variables == {"text": "buy milk"}


def test_markdown_keeps_block_order():
    response = (
        "```json\n"
        '{"function": "create", "input": {"text": "a"}}\n'
        "```\n\n"
        "```json\n"
        '{"description": "missing function"}\n'
        "```\n\n"
        "~~~\n"
        '{"function": "findAll"}\n'
        "~~~\n"
    )
    plan = PlanParser().parse(response)
    assert [step.function_name for step in plan.steps] == ["create", "findAll"]


def test_markdown_step_without_input_has_no_variables():
    response = 'First list the todos.\n\n```json\n{"function":"findAll"}\n```\n'
    plan = PlanParser().parse(response)
    assert plan.steps[0].function_name == "findAll"
    assert not plan.steps[0].variables


def test_markdown_without_blocks_yields_empty_plan():
    assert PlanParser().parse("I cannot help with that.").steps == []
    assert PlanParser().parse("").steps == []


def test_nested_fences_are_ignored():
    response = (
        "> ```json\n"
        '> {"function": "deleteById", "input": {"id": 1}}\n'
        "> ```\n\n"
        "```json\n"
        '{"function": "findAll"}\n'
        "```\n"
    )
    plan = PlanParser().parse(response)
    assert [step.function_name for step in plan.steps] == ["findAll"]


def test_extract_code_blocks_returns_block_contents():
    blocks = PlanParser().extract_code_blocks("text\n\n```\nfirst\n```\n\n```python\nsecond\n```\n")
    assert blocks == ["first\n", "second\n"]


def test_nested_values_survive_parsing():
    response = (
        '{"function": "createMultiple", "input": {"todos": '
        '[{"text": "a", "done": true}, {"text": "b", "done": false}], "note": null}}'
    )
    step = PlanParser().parse(response).steps[0]
    assert step.variables == {
        "todos": [{"text": "a", "done": True}, {"text": "b", "done": False}],
        "note": None,
    }


def test_serialized_step_parses_back():
    step = PlanStep(function_name="updateById", description="finish it", variables={"id": 3, "done": True})
    parsed = PlanParser().parse(step.to_json()).steps[0]
    assert parsed == step


def test_overly_nested_block_is_skipped():
    response = "```\n" + "[" * 100000 + "\n```\n\n" + '```json\n{"function": "findAll"}\n```\n'
    plan = PlanParser().parse(response)
    assert [step.function_name for step in plan.steps] == ["findAll"]


def test_overly_nested_direct_json_is_a_parse_error():
    with pytest.raises(PlanParseError):
        PlanParser().parse('{"function": "create", "input": ' + "[" * 100000)
