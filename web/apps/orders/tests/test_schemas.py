import pytest
from pydantic import ValidationError
from orders.schemas import CreateOrderDTO, LineItemIn


@pytest.mark.parametrize(
    "ref",
    [1, "1", "http://localhost/catalog/1", "http://localhost/com.epages.microservice.handson.catalog/1/"],
)
def test_pizza_reference_forms(ref):
    assert LineItemIn.model_validate({"amount": 1, "pizza": ref}).pizza == 1


@pytest.mark.parametrize("ref", ["", "abc", "http://localhost/catalog/", True, 0, 1.5])
def test_invalid_pizza_reference(ref):
    with pytest.raises(ValidationError):
        LineItemIn.model_validate({"amount": 1, "pizza": ref})


def test_camel_case_payload(order_payload):
    dto = CreateOrderDTO.model_validate(order_payload)
    assert dto.delivery_address.postal_code == "22305"
    assert dto.order_items[0].pizza == 1


def test_bad_email_rejected(order_payload):
    order_payload["deliveryAddress"]["email"] = "not-an-email"
    with pytest.raises(ValidationError):
        CreateOrderDTO.model_validate(order_payload)


def test_missing_address_field_rejected(order_payload):
    del order_payload["deliveryAddress"]["telephone"]
    with pytest.raises(ValidationError):
        CreateOrderDTO.model_validate(order_payload)
