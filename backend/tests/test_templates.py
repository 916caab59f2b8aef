import pytest

from prompter.constants.default_templates import DEFAULT_TEMPLATES
from prompter.core import AppError, ErrorCode
from prompter.schemas.template import TemplateCreateRequest, TemplateUpdateRequest
from prompter.services.template_service import TemplateService


@pytest.fixture
def templates(session_factory):
    return TemplateService(session_factory)


def test_seed_inserts_defaults_in_order(templates):
    assert templates.seed_defaults() == 10

    listed = templates.list()
    assert [t.name for t in listed] == [name for name, _ in DEFAULT_TEMPLATES]
    assert all(t.is_default for t in listed)
    assert [t.sort_order for t in listed] == list(range(10))


def test_seed_is_idempotent(templates):
    templates.seed_defaults()
    assert templates.seed_defaults() == 0
    assert len(templates.list()) == 10


def test_seed_readds_missing_default(templates):
    templates.seed_defaults()
    code_review = next(t for t in templates.list() if t.name == "Code Review")
    templates.delete(code_review.id)

    assert templates.seed_defaults() == 1

    readded = next(t for t in templates.list() if t.name == "Code Review")
    assert readded.id != code_review.id
    assert readded.sort_order == 9
    assert readded.is_default is True


def test_create_update_delete(templates):
    created = templates.create(TemplateCreateRequest(name="  Mine  ", content="Do the thing:"))
    assert created.name == "Mine"
    assert created.is_default is False

    updated = templates.update(created.id, TemplateUpdateRequest(content="Do it better:"))
    assert updated.name == "Mine"
    assert updated.content == "Do it better:"

    templates.delete(created.id)
    with pytest.raises(AppError) as exc:
        templates.get(created.id)
    assert exc.value.status_code == 404
    assert exc.value.code == ErrorCode.TEMPLATE_NOT_FOUND


def test_blank_content_is_rejected(templates):
    with pytest.raises(AppError) as exc:
        templates.create(TemplateCreateRequest(name="Blank", content="   "))
    assert exc.value.code == ErrorCode.TEMPLATE_INVALID


def test_apply_prefixes_template_content(templates):
    created = templates.create(TemplateCreateRequest(name="Debug", content="Help me debug this issue:"))

    assert templates.apply(created.id, "  NPE in parser ") == "Help me debug this issue:\n\nNPE in parser"
    assert templates.apply(created.id, "   ") == ""
