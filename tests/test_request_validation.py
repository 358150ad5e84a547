"""
Unit tests for request body validation.
"""

import pytest

from core.exceptions import ValidationError
from models.print_request import Orientation, ResizeStrategy
from modules.request_validation import (
    parse_confirm_request,
    parse_print_request,
    validate_order_id,
)


@pytest.fixture
def body():
    return {
        "originalbase64Image": "data:image/png;base64,iVBORw0KGgo=",
        "border_size": 10,
        "border_color": "#FF0000",
        "orientation": "Portrait",
        "orderID": "1001",
        "paperSize": "A4",
        "resizeOption": "contain",
    }


class TestParsePrintRequest:
    """Test /add-border body validation."""

    def test_valid_named_request(self, body, settings):
        request = parse_print_request(body, settings)
        assert request.paper.name == "A4"
        assert not request.paper.is_custom
        assert request.orientation is Orientation.PORTRAIT
        assert request.resize is ResizeStrategy.CONTAIN
        assert request.border_size == 10
        assert request.border_color == (255, 0, 0, 255)
        assert request.order_id == "1001"
        assert request.wants_border

    def test_lowercase_paper_size_normalized(self, body, settings):
        body["paperSize"] = "a3"
        assert parse_print_request(body, settings).paper.name == "A3"

    def test_border_color_optional(self, body, settings):
        del body["border_color"]
        request = parse_print_request(body, settings)
        assert request.border_color is None
        assert not request.wants_border

    def test_zero_border_disables_bordering(self, body, settings):
        body["border_size"] = 0
        assert not parse_print_request(body, settings).wants_border

    def test_custom_size(self, body, settings):
        del body["paperSize"]
        body["isCustom"] = True
        body["sizes"] = {"width": 800.4, "height": 600}
        request = parse_print_request(body, settings)
        assert request.paper.is_custom
        assert request.paper.custom == (800, 600)

    @pytest.mark.parametrize("border_size", [101, -1, "10", True, None, float("nan")])
    def test_border_size_out_of_range(self, body, settings, border_size):
        body["border_size"] = border_size
        with pytest.raises(ValidationError) as exc_info:
            parse_print_request(body, settings)
        assert "border_size" in exc_info.value.fields

    def test_border_size_limits_inclusive(self, body, settings):
        body["border_size"] = 100
        assert parse_print_request(body, settings).border_size == 100

    def test_all_errors_collected(self, settings):
        with pytest.raises(ValidationError) as exc_info:
            parse_print_request({"border_size": 500, "orientation": "portrait"}, settings)

        fields = exc_info.value.fields
        for name in ("originalbase64Image", "border_size", "orientation", "orderID",
                     "resizeOption", "paperSize"):
            assert name in fields
        assert exc_info.value.status_code == 400
        assert exc_info.value.message == fields["originalbase64Image"]

    def test_unknown_paper_size(self, body, settings):
        body["paperSize"] = "Letter"
        with pytest.raises(ValidationError) as exc_info:
            parse_print_request(body, settings)
        assert "Unknown paper size" in exc_info.value.fields["paperSize"]

    def test_unknown_resize_option(self, body, settings):
        body["resizeOption"] = "stretch"
        with pytest.raises(ValidationError) as exc_info:
            parse_print_request(body, settings)
        assert "resizeOption" in exc_info.value.fields

    def test_malformed_border_color(self, body, settings):
        body["border_color"] = "#GG0000"
        with pytest.raises(ValidationError) as exc_info:
            parse_print_request(body, settings)
        assert "border_color" in exc_info.value.fields

    def test_is_custom_must_be_boolean(self, body, settings):
        body["isCustom"] = "yes"
        with pytest.raises(ValidationError) as exc_info:
            parse_print_request(body, settings)
        assert "isCustom" in exc_info.value.fields

    @pytest.mark.parametrize("sizes", [None, {"width": 10}, {"width": 0, "height": 5},
                                       {"width": "10", "height": 5}])
    def test_custom_sizes_invalid(self, body, settings, sizes):
        body["isCustom"] = True
        body["sizes"] = sizes
        with pytest.raises(ValidationError) as exc_info:
            parse_print_request(body, settings)
        assert "sizes" in exc_info.value.fields

    def test_custom_size_capped_at_b0(self, body, settings):
        body["isCustom"] = True
        body["sizes"] = {"width": 100000, "height": 100000}
        with pytest.raises(ValidationError) as exc_info:
            parse_print_request(body, settings)
        assert "1181x1670" in exc_info.value.fields["sizes"]

    def test_custom_size_b0_landscape_allowed(self, body, settings):
        body["isCustom"] = True
        body["sizes"] = {"width": 1670, "height": 1181}
        assert parse_print_request(body, settings).paper.custom == (1670, 1181)

    def test_non_object_body(self, settings):
        with pytest.raises(ValidationError):
            parse_print_request(["not", "an", "object"], settings)

    def test_max_border_size_follows_settings(self, body):
        from config import PipelineSettings
        body["border_size"] = 60
        with pytest.raises(ValidationError):
            parse_print_request(body, PipelineSettings(dpi=30, max_border_size=50))


class TestOrderIds:

    def test_numeric_id_accepted(self):
        assert validate_order_id(1234) == "1234"

    def test_html_stripped(self):
        assert validate_order_id("<b>1234</b>") == "1234"

    @pytest.mark.parametrize("value", ["", "   ", "12 34", "../etc", "a" * 65, None, True])
    def test_rejected(self, value):
        with pytest.raises(ValidationError):
            validate_order_id(value)

    def test_confirm_request(self):
        assert parse_confirm_request({"id": "1001"}) == "1001"

    def test_confirm_request_missing_id(self):
        with pytest.raises(ValidationError) as exc_info:
            parse_confirm_request({})
        assert "id" in exc_info.value.fields
