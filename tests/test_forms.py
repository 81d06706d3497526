import pytest
from pydantic import ValidationError

from views.forms import AudienceForm, BusinessForm, LoginForm, ManualAudienceForm, SessionForm


def test_business_form_trims_and_requires_name():
    form = BusinessForm(name="  Bakery  ", industry_category="Food")
    assert form.name == "Bakery"
    assert form.description is None

    with pytest.raises(ValidationError):
        BusinessForm(name="   ")


def test_audience_forms():
    assert AudienceForm(name="Parents").name == "Parents"
    with pytest.raises(ValidationError):
        AudienceForm(name="")

    manual = ManualAudienceForm(manual_description="First-time buyers")
    assert manual.name is None
    with pytest.raises(ValidationError):
        ManualAudienceForm(manual_description=" \n ")


@pytest.mark.parametrize("missing", ["business_type_id", "audience_id", "mission_objective"])
def test_session_form_requires_every_field(missing):
    data = {"business_type_id": "1", "audience_id": "2", "mission_objective": "Book a call"}
    data[missing] = "  "
    with pytest.raises(ValidationError):
        SessionForm(**data)


def test_login_form():
    assert LoginForm(email=" ada@example.com ", password="pw").email == "ada@example.com"
    with pytest.raises(ValidationError):
        LoginForm(email="not-an-email", password="pw")
    with pytest.raises(ValidationError):
        LoginForm(email="ada@example.com", password="")
