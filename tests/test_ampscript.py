"""Tests for cloudpages.services.ampscript."""

import pytest

from cloudpages.config import get_settings
from cloudpages.models.ampscript import AmpscriptBlock
from cloudpages.services.ampscript import (
    combine_blocks,
    comment_text,
    conditional_content_ampscript,
    dynamic_list_ampscript,
    email_validation_ampscript,
    form_prepopulation_ampscript,
    generate_ampscript_blocks,
    generate_dynamic_content,
    identifier,
    personalized_offers_ampscript,
    quote,
    wrap_ampscript,
)
from cloudpages.services.configuration_parser import validate_configuration


def _config(components=None, data_extensions=None, title="Test Title"):
    return validate_configuration(
        {
            "pageSettings": {"pageName": "Test Page", "pageType": "form", "title": title},
            "codeResources": {"css": {"framework": "bootstrap"}},
            "advancedOptions": {
                "ampscriptEnabled": True,
                "dataExtensionIntegration": data_extensions or [],
            },
            "components": components or [],
        }
    )


_EMAIL_FORM = {
    "id": "signup",
    "type": "form",
    "position": 0,
    "props": {"fields": [{"name": "email", "type": "email", "required": True}]},
}


@pytest.fixture(autouse=True)
def _fresh_settings():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

class TestHelpers:
    def test_quote_doubles_inner_quotes(self):
        assert quote('say "hi"') == '"say ""hi"""'

    def test_quote_none(self):
        assert quote(None) == '""'

    def test_identifier_sanitizes(self):
        assert identifier("first-name") == "first_name"
        assert identifier("2nd field") == "_2nd_field"
        assert identifier("!!!") == "field"

    def test_comment_text_neutralises_delimiters(self):
        assert comment_text("Sale */ ]%% SET @x = 1 /* %%=v(@y)=%%") == "Sale SET @x = 1 =v(@y)="

    def test_wrap(self):
        assert wrap_ampscript("SET @a = 1") == "%%[\nSET @a = 1\n]%%"
        assert wrap_ampscript("%%=v(@a)=%%") == "%%=v(@a)=%%"


# ---------------------------------------------------------------------------
# Page blocks
# ---------------------------------------------------------------------------

class TestGenerateBlocks:
    def test_minimal_page(self):
        blocks = generate_ampscript_blocks(_config())
        assert [b.type for b in blocks] == ["header", "inline", "footer"]
        assert all(b.content.startswith("%%[") and b.content.endswith("]%%") for b in blocks)

    def test_header_declares_core_variables(self):
        header = generate_ampscript_blocks(_config())[0]
        assert "SET @subscriberKey = _subscriberkey" in header.content
        assert 'SET @pageTitle = "Test Title"' in header.content
        assert "VAR @formSubmitted" in header.content

    def test_header_comment_strips_delimiters_from_page_name(self):
        config = validate_configuration(
            {
                "pageSettings": {"pageName": "Promo */ ]%% x", "pageType": "landing", "title": "T"},
                "codeResources": {"css": {"framework": "bootstrap"}},
            }
        )
        header = generate_ampscript_blocks(config)[0].content
        assert "/* Page: Promo x */" in header
        assert header.count("]%%") == 1
        assert header.count("*/") == header.count("/*")

    def test_header_escapes_title(self):
        header = generate_ampscript_blocks(_config(title='The "Best" Page'))[0]
        assert 'SET @pageTitle = "The ""Best"" Page"' in header.content

    def test_header_declares_data_extension_pairs(self):
        header = generate_ampscript_blocks(_config(data_extensions=["Customer Data"]))[0]
        assert "VAR @Customer_DataRows, @Customer_DataRowCount, @Customer_DataData" in header.content

    def test_inline_block_per_component_snippet(self):
        components = [
            {"id": "hero-1", "type": "hero", "position": 0, "ampscript": "SET @x = 1"},
            {"id": "cta-1", "type": "cta", "position": 1, "ampscript": "   "},
        ]
        blocks = generate_ampscript_blocks(_config(components))
        component_blocks = [b for b in blocks if "hero-1" in b.description]
        assert len(component_blocks) == 1
        assert component_blocks[0].type == "inline"
        assert component_blocks[0].content == "%%[\nSET @x = 1\n]%%"
        assert not any("cta-1" in b.description for b in blocks)

    def test_email_form_scenario(self):
        blocks = generate_ampscript_blocks(_config([_EMAIL_FORM]))
        form = next(b for b in blocks if b.description == "Form handling and validation AMPScript")
        assert "VAR @email" in form.content
        assert 'SET @email = RequestParameter("email")' in form.content
        assert "IsEmailAddress(@email)" in form.content
        assert "IF Empty(@email) THEN" in form.content
        assert 'IF @isValid == "true" THEN' in form.content
        assert form.content.index('IF @isValid == "true" THEN') < form.content.index("UpsertData(")
        assert form.content.count("UpsertData(") == 1

    def test_form_without_fields_uses_rendered_defaults(self):
        blocks = generate_ampscript_blocks(_config([{"id": "f", "type": "form", "position": 0}]))
        form = next(b for b in blocks if b.description == "Form handling and validation AMPScript")
        for name in ("firstName", "lastName", "email", "message"):
            assert f'SET @{name} = RequestParameter("{name}")' in form.content
        assert "IsEmailAddress(@email)" in form.content

    def test_form_with_empty_fields_upserts_key_only(self):
        component = {"id": "f", "type": "form", "position": 0, "props": {"fields": []}}
        blocks = generate_ampscript_blocks(_config([component]))
        form = next(b for b in blocks if b.description == "Form handling and validation AMPScript")
        assert "RequestParameter(" not in form.content
        assert '"SubscriberKey", @subscriberKey,\n        "SubmissionDate"' in form.content

    def test_form_writes_to_settings_data_extension(self, monkeypatch):
        monkeypatch.setenv("CLOUDPAGES_FORM_DATA_EXTENSION", "Leads")
        get_settings.cache_clear()
        blocks = generate_ampscript_blocks(_config([_EMAIL_FORM]))
        assert any('UpsertData("Leads", 1,' in b.content for b in blocks)

    def test_form_data_extension_prop_wins(self):
        component = dict(_EMAIL_FORM, props=dict(_EMAIL_FORM["props"], dataExtension="Signups"))
        blocks = generate_ampscript_blocks(_config([component]))
        assert any('UpsertData("Signups", 1,' in b.content for b in blocks)

    def test_no_form_block_without_form(self):
        blocks = generate_ampscript_blocks(_config([{"id": "h", "type": "hero", "position": 0}]))
        assert not any("UpsertData" in b.content for b in blocks)

    def test_lookup_block(self):
        blocks = generate_ampscript_blocks(_config(data_extensions=["Orders"]))
        lookup = next(b for b in blocks if "LookupRows" in b.content)
        assert 'SET @OrdersRows = LookupRows("Orders", "SubscriberKey", @subscriberKey)' in lookup.content
        assert "SET @OrdersRowCount = RowCount(@OrdersRows)" in lookup.content

    def test_personalization_fallback(self):
        blocks = generate_ampscript_blocks(_config())
        personalization = next(b for b in blocks if "Personalization" in b.content)
        assert 'SET @firstName = "Valued Customer"' in personalization.content
        assert 'DatePart(@currentDate, "H")' in personalization.content

    def test_tracking_is_the_only_footer_block(self):
        blocks = generate_ampscript_blocks(_config([_EMAIL_FORM], data_extensions=["Orders"]))
        footers = [b for b in blocks if b.type == "footer"]
        assert len(footers) == 1
        assert 'InsertData("PageViews",' in footers[0].content
        assert 'InsertData("UTMTracking",' in footers[0].content


# ---------------------------------------------------------------------------
# Combination
# ---------------------------------------------------------------------------

class TestCombineBlocks:
    def test_empty(self):
        assert combine_blocks([]) == ""

    def test_order_is_header_inline_footer(self):
        blocks = [
            AmpscriptBlock(type="footer", content="%%[ /* F */ ]%%", description="foot"),
            AmpscriptBlock(type="inline", content="%%[ /* I */ ]%%", description="mid"),
            AmpscriptBlock(type="header", content="%%[ /* H */ ]%%", description="head"),
        ]
        combined = combine_blocks(blocks)
        assert combined.index("/* H */") < combined.index("/* I */") < combined.index("/* F */")

    def test_each_block_preceded_by_description(self):
        combined = combine_blocks([AmpscriptBlock(type="inline", content="%%[ ]%%", description="mid")])
        assert "<!-- mid -->\n%%[ ]%%" in combined

    def test_generated_blocks_are_ordered(self):
        config = _config(
            [dict(_EMAIL_FORM, ampscript="SET @inlineMarker = 1")],
            data_extensions=["Orders"],
        )
        combined = combine_blocks(generate_ampscript_blocks(config))
        header = combined.index("Initialize core variables")
        inline = combined.index("@inlineMarker")
        footer = combined.index("Tracking and Analytics")
        assert header < inline < footer
        assert combined.index("<!-- AMPScript Header -->") < combined.index("<!-- AMPScript Inline Blocks -->")
        assert combined.index("<!-- AMPScript Inline Blocks -->") < combined.index("<!-- AMPScript Footer -->")


# ---------------------------------------------------------------------------
# Standalone snippets
# ---------------------------------------------------------------------------

class TestStandaloneSnippets:
    def test_conditional_content(self):
        snippet = conditional_content_ampscript()
        assert 'IF @userSegment == "Premium" THEN' in snippet
        assert 'ELSEIF @userSegment == "Standard" THEN' in snippet
        assert 'SET @showContent = "basic"' in snippet

    def test_dynamic_list(self):
        snippet = dynamic_list_ampscript("Products", fields=("Name", "Price"))
        assert 'LookupRows("Products", "Active", "true")' in snippet
        assert "FOR @i = 1 TO @listRowCount DO" in snippet
        assert '%%=Field(@currentRow, "Name")=%%' in snippet
        assert '%%=Field(@currentRow, "Price")=%%' in snippet

    def test_personalized_offers(self):
        snippet = personalized_offers_ampscript()
        assert 'LookupRows("Offers", "Category", @userPreferences, "Active", "true")' in snippet
        assert '%%=Field(@recommendedOffer, "PromoCode")=%%' in snippet

    def test_form_prepopulation(self):
        snippet = form_prepopulation_ampscript(["FirstName", "e-mail"])
        assert 'SET @FirstNameValue = AttributeValue("FirstName")' in snippet
        assert 'SET @e_mailValue = AttributeValue("e-mail")' in snippet

    def test_email_validation(self):
        snippet = email_validation_ampscript("emailAddress")
        assert "SET @cleanEmail = Trim(Lowercase(@emailAddress))" in snippet
        assert "IsEmailAddress(@cleanEmail)" in snippet

    def test_dispatcher(self):
        assert generate_dynamic_content("dynamic-list") == dynamic_list_ampscript()
        assert generate_dynamic_content("conditional-content", {"segments": ["Gold"]}).count("ELSEIF") == 0
        assert generate_dynamic_content("personalized-offers") == personalized_offers_ampscript()

    def test_dispatcher_unknown_kind(self):
        assert generate_dynamic_content("hologram") == ""
