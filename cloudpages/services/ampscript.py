"""AMPscript generation for dynamic, personalized cloud pages.

Blocks follow the Marketing Cloud delimiters exactly: ``%%[ ... ]%%`` for
statements and ``%%= ... =%%`` for inline output.  Every generated block is
typed ``header``, ``inline`` or ``footer``; :func:`combine_blocks` always
emits them in that order regardless of the order they were generated in.
"""

import re
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from cloudpages.config import get_settings
from cloudpages.models.ampscript import AmpscriptBlock
from cloudpages.models.configuration import ComponentInstance, PageConfiguration
from cloudpages.services.component_library import DEFAULT_FORM_FIELDS

_BLOCK_ORDER = ("header", "inline", "footer")

_SECTION_TITLES = {
    "header": "AMPScript Header",
    "inline": "AMPScript Inline Blocks",
    "footer": "AMPScript Footer",
}


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def quote(value: Any) -> str:
    """Return *value* as an AMPscript string literal."""
    text = "" if value is None else str(value)
    return '"' + text.replace('"', '""') + '"'


def identifier(name: str) -> str:
    """Turn an arbitrary field or data extension name into a variable stem."""
    stem = re.sub(r"\W+", "_", name).strip("_")
    if not stem:
        return "field"
    if stem[0].isdigit():
        stem = f"_{stem}"
    return stem


def comment_text(value: str) -> str:
    """Make *value* safe inside a ``/* */`` comment of a ``%%[ ]%%`` block."""
    text = re.sub(r"\*/|/\*|%%|\]%%", " ", str(value))
    return " ".join(text.split())


def wrap_ampscript(snippet: str) -> str:
    """Wrap a raw statement snippet in a ``%%[ ]%%`` block unless already delimited."""
    stripped = snippet.strip()
    if stripped.startswith("%%[") or stripped.startswith("%%="):
        return stripped
    return f"%%[\n{stripped}\n]%%"


def _form_fields(config: PageConfiguration) -> List[Mapping[str, Any]]:
    """Return form fields across all form components, first declaration wins.

    A form without a ``fields`` prop renders :data:`DEFAULT_FORM_FIELDS`, so those
    are the fields its submission carries.
    """
    seen = set()
    fields: List[Mapping[str, Any]] = []
    for component in config.components:
        if component.type != "form":
            continue
        declared = component.props["fields"] if "fields" in component.props else DEFAULT_FORM_FIELDS
        for field in declared or []:
            if not isinstance(field, Mapping) or not field.get("name"):
                continue
            if field["name"] in seen:
                continue
            seen.add(field["name"])
            fields.append(field)
    return fields


def _form_data_extension(config: PageConfiguration) -> str:
    for component in config.components:
        if component.type == "form" and component.props.get("dataExtension"):
            return str(component.props["dataExtension"])
    return get_settings().form_data_extension


# ---------------------------------------------------------------------------
# Page blocks
# ---------------------------------------------------------------------------

def _header_block(config: PageConfiguration) -> AmpscriptBlock:
    settings = config.page_settings
    lines = [
        "%%[",
        f"  /* Page: {comment_text(settings.page_name)} */",
        "",
        "  /* Initialize core variables */",
        "  VAR @subscriberKey, @emailAddress, @firstName, @lastName",
        "  VAR @pageTitle, @pageDescription, @currentDate",
        "  VAR @errorMessage, @successMessage, @formSubmitted",
        "",
        "  /* Get subscriber information */",
        "  SET @subscriberKey = _subscriberkey",
        "  SET @emailAddress = emailaddr",
        "  SET @currentDate = Now()",
        "",
        "  /* Set page metadata */",
        f"  SET @pageTitle = {quote(settings.title or settings.page_name)}",
        f"  SET @pageDescription = {quote(settings.description or '')}",
        "",
        "  /* Initialize form variables */",
        '  SET @formSubmitted = RequestParameter("submitted")',
        '  SET @errorMessage = ""',
        '  SET @successMessage = ""',
    ]

    data_extensions = config.advanced_options.data_extension_integration
    if data_extensions:
        lines.append("")
        lines.append("  /* Data extension variables */")
        for name in data_extensions:
            stem = identifier(name)
            lines.append(f"  VAR @{stem}Rows, @{stem}RowCount, @{stem}Data")

    lines.append("]%%")
    return AmpscriptBlock(
        type="header",
        content="\n".join(lines),
        description="Header AMPScript with variable declarations and subscriber data",
    )


def _component_block(component: ComponentInstance) -> AmpscriptBlock:
    return AmpscriptBlock(
        type="inline",
        content=wrap_ampscript(component.ampscript or ""),
        description=f"AMPScript for {component.type} component ({component.id})",
    )


def _form_handling_block(config: PageConfiguration) -> AmpscriptBlock:
    fields = _form_fields(config)
    data_extension = _form_data_extension(config)

    lines = [
        "%%[",
        "  /* Form Handling Logic */",
        '  IF @formSubmitted == "true" THEN',
        "",
        "    /* Get form data */",
    ]
    for field in fields:
        var = identifier(str(field["name"]))
        lines.append(f"    VAR @{var}")
        lines.append(f"    SET @{var} = RequestParameter({quote(field['name'])})")

    lines += [
        "",
        "    /* Validate required fields */",
        "    VAR @isValid",
        '    SET @isValid = "true"',
    ]
    for field in fields:
        var = identifier(str(field["name"]))
        label = field.get("label") or field["name"]
        if field.get("required"):
            lines += [
                f"    IF Empty(@{var}) THEN",
                f"      SET @errorMessage = Concat(@errorMessage, {quote(f'{label} is required. ')})",
                '      SET @isValid = "false"',
                "    ENDIF",
            ]
        if field.get("type") == "email":
            lines += [
                f"    IF NOT Empty(@{var}) AND NOT IsEmailAddress(@{var}) THEN",
                '      SET @errorMessage = Concat(@errorMessage, "Please enter a valid email address. ")',
                '      SET @isValid = "false"',
                "    ENDIF",
            ]

    columns = ['        "SubscriberKey", @subscriberKey']
    for field in fields:
        columns.append(f"        {quote(field['name'])}, @{identifier(str(field['name']))}")
    columns.append('        "SubmissionDate", @currentDate')

    lines += [
        "",
        "    /* Process form if valid */",
        '    IF @isValid == "true" THEN',
        "      VAR @upsertResult",
        f"      SET @upsertResult = UpsertData({quote(data_extension)}, 1,",
        ",\n".join(columns),
        "      )",
        "",
        "      IF @upsertResult > 0 THEN",
        '        SET @successMessage = "Thank you! Your information has been submitted successfully."',
        "      ELSE",
        '        SET @errorMessage = "There was an error processing your request. Please try again."',
        "      ENDIF",
        "    ENDIF",
        "",
        "  ENDIF",
        "]%%",
    ]
    return AmpscriptBlock(
        type="inline",
        content="\n".join(lines),
        description="Form handling and validation AMPScript",
    )


def _data_extension_block(data_extensions: Sequence[str]) -> AmpscriptBlock:
    lines = ["%%[", "  /* Data Extension Integration */"]
    for name in data_extensions:
        stem = identifier(name)
        lines += [
            "",
            f"  /* Retrieve data from {comment_text(name)} */",
            f'  SET @{stem}Rows = LookupRows({quote(name)}, "SubscriberKey", @subscriberKey)',
            f"  SET @{stem}RowCount = RowCount(@{stem}Rows)",
            f"  IF @{stem}RowCount > 0 THEN",
            f"    SET @{stem}Data = Row(@{stem}Rows, 1)",
            "  ENDIF",
        ]
    lines.append("]%%")
    return AmpscriptBlock(
        type="inline",
        content="\n".join(lines),
        description="Data extension lookup and data retrieval",
    )


def _personalization_block() -> AmpscriptBlock:
    fallback = get_settings().fallback_first_name
    content = f"""%%[
  /* Personalization Logic */
  SET @firstName = AttributeValue("FirstName")
  SET @lastName = AttributeValue("LastName")

  IF Empty(@firstName) THEN
    SET @firstName = {quote(fallback)}
  ENDIF

  VAR @greeting
  SET @greeting = Concat("Hello, ", @firstName)

  /* Time-based personalization */
  VAR @currentHour, @timeGreeting
  SET @currentHour = DatePart(@currentDate, "H")

  IF @currentHour < 12 THEN
    SET @timeGreeting = "Good morning"
  ELSEIF @currentHour < 17 THEN
    SET @timeGreeting = "Good afternoon"
  ELSE
    SET @timeGreeting = "Good evening"
  ENDIF

  SET @greeting = Concat(@timeGreeting, ", ", @firstName, "!")
]%%"""
    return AmpscriptBlock(
        type="inline",
        content=content,
        description="Personalization and dynamic greeting logic",
    )


def _tracking_block(config: PageConfiguration) -> AmpscriptBlock:
    settings = get_settings()
    page_name = quote(config.page_settings.page_name)
    content = f"""%%[
  /* Tracking and Analytics */
  VAR @trackingResult
  SET @trackingResult = InsertData({quote(settings.page_view_data_extension)},
    "SubscriberKey", @subscriberKey,
    "PageName", {page_name},
    "ViewDate", @currentDate,
    "UserAgent", HTTPRequestHeader("User-Agent")
  )

  /* Track UTM parameters if present */
  VAR @utmSource, @utmMedium, @utmCampaign
  SET @utmSource = RequestParameter("utm_source")
  SET @utmMedium = RequestParameter("utm_medium")
  SET @utmCampaign = RequestParameter("utm_campaign")

  IF NOT Empty(@utmSource) OR NOT Empty(@utmMedium) OR NOT Empty(@utmCampaign) THEN
    SET @trackingResult = InsertData({quote(settings.utm_data_extension)},
      "SubscriberKey", @subscriberKey,
      "PageName", {page_name},
      "UTMSource", @utmSource,
      "UTMMedium", @utmMedium,
      "UTMCampaign", @utmCampaign,
      "TrackingDate", @currentDate
    )
  ENDIF
]%%"""
    return AmpscriptBlock(
        type="footer",
        content=content,
        description="Page view and UTM parameter tracking",
    )


def generate_ampscript_blocks(config: PageConfiguration) -> List[AmpscriptBlock]:
    """Return every AMPscript block the page needs, in generation order."""
    blocks = [_header_block(config)]

    for component in config.components:
        if component.ampscript and component.ampscript.strip():
            blocks.append(_component_block(component))

    if config.has_component_type("form"):
        blocks.append(_form_handling_block(config))

    data_extensions = config.advanced_options.data_extension_integration
    if data_extensions:
        blocks.append(_data_extension_block(data_extensions))

    blocks.append(_personalization_block())
    blocks.append(_tracking_block(config))

    return [block for block in blocks if block.content.strip()]


def combine_blocks(blocks: Iterable[AmpscriptBlock]) -> str:
    """Join *blocks* as header blocks, then inline blocks, then footer blocks."""
    grouped: Dict[str, List[AmpscriptBlock]] = {kind: [] for kind in _BLOCK_ORDER}
    for block in blocks:
        grouped[block.type].append(block)

    parts: List[str] = []
    for kind in _BLOCK_ORDER:
        if not grouped[kind]:
            continue
        parts.append(f"<!-- {_SECTION_TITLES[kind]} -->\n")
        for block in grouped[kind]:
            parts.append(f"<!-- {block.description} -->\n{block.content}\n\n")
    return "".join(parts)


# ---------------------------------------------------------------------------
# Standalone snippets
# ---------------------------------------------------------------------------

def conditional_content_ampscript(
    segments: Sequence[str] = ("Premium", "Standard"),
    attribute: str = "Segment",
    fallback: str = "basic",
) -> str:
    """Show a different content slot per subscriber segment."""
    lines = [
        "%%[",
        "  /* Conditional Content Display */",
        "  VAR @showContent, @userSegment",
        f"  SET @userSegment = AttributeValue({quote(attribute)})",
        "",
    ]
    for index, segment in enumerate(segments):
        keyword = "IF" if index == 0 else "ELSEIF"
        lines.append(f"  {keyword} @userSegment == {quote(segment)} THEN")
        lines.append(f"    SET @showContent = {quote(segment.lower())}")
    if segments:
        lines.append("  ELSE")
        lines.append(f"    SET @showContent = {quote(fallback)}")
        lines.append("  ENDIF")
    else:
        lines.append(f"  SET @showContent = {quote(fallback)}")
    lines.append("]%%")
    lines.append("")

    for index, segment in enumerate(segments):
        keyword = "IF" if index == 0 else "ELSEIF"
        lines.append(f"%%[ {keyword} @showContent == {quote(segment.lower())} THEN ]%%")
        lines.append(f"  <!-- {segment} content here -->")
    if segments:
        lines.append("%%[ ELSE ]%%")
        lines.append(f"  <!-- {fallback.capitalize()} content here -->")
        lines.append("%%[ ENDIF ]%%")
    return "\n".join(lines)


def dynamic_list_ampscript(
    data_extension: str = "ListData",
    filter_field: str = "Active",
    filter_value: str = "true",
    fields: Sequence[str] = ("Title", "Description"),
) -> str:
    """Render every matching row of *data_extension* as a list item."""
    title_field, *other_fields = list(fields) or ["Title"]
    item_lines = [f"    <h3>%%=Field(@currentRow, {quote(title_field)})=%%</h3>"]
    for name in other_fields:
        item_lines.append(f"    <p>%%=Field(@currentRow, {quote(name)})=%%</p>")

    return "\n".join(
        [
            "%%[",
            "  /* Dynamic List Generation */",
            "  VAR @listRows, @listRowCount, @i, @currentRow",
            f"  SET @listRows = LookupRows({quote(data_extension)}, "
            f"{quote(filter_field)}, {quote(filter_value)})",
            "  SET @listRowCount = RowCount(@listRows)",
            "]%%",
            "",
            "%%[ IF @listRowCount > 0 THEN ]%%",
            '<ul class="dynamic-list">',
            "%%[ FOR @i = 1 TO @listRowCount DO ]%%",
            "  %%[ SET @currentRow = Row(@listRows, @i) ]%%",
            "  <li>",
            *item_lines,
            "  </li>",
            "%%[ NEXT @i ]%%",
            "</ul>",
            "%%[ ELSE ]%%",
            "<p>No items available at this time.</p>",
            "%%[ ENDIF ]%%",
        ]
    )


def personalized_offers_ampscript(
    data_extension: str = "Offers",
    preference_attribute: str = "Preferences",
) -> str:
    """Look up the first active offer matching the subscriber's preference."""
    return f"""%%[
  /* Personalized Offers */
  VAR @offerRows, @offerRowCount, @userPreferences, @recommendedOffer
  SET @userPreferences = AttributeValue({quote(preference_attribute)})
  SET @offerRows = LookupRows({quote(data_extension)}, "Category", @userPreferences, "Active", "true")
  SET @offerRowCount = RowCount(@offerRows)

  IF @offerRowCount > 0 THEN
    SET @recommendedOffer = Row(@offerRows, 1)
  ENDIF
]%%

%%[ IF @offerRowCount > 0 THEN ]%%
<div class="personalized-offer">
  <h3>Special Offer for You!</h3>
  <h4>%%=Field(@recommendedOffer, "Title")=%%</h4>
  <p>%%=Field(@recommendedOffer, "Description")=%%</p>
  <p class="offer-code">Use code: <strong>%%=Field(@recommendedOffer, "PromoCode")=%%</strong></p>
  <a href="%%=Field(@recommendedOffer, "OfferURL")=%%" class="btn btn-primary">Claim Offer</a>
</div>
%%[ ENDIF ]%%"""


def form_prepopulation_ampscript(fields: Iterable[str]) -> str:
    """Declare ``@<field>Value`` for each field, read from subscriber attributes."""
    lines = ["%%[", "  /* Form Pre-population */"]
    for name in fields:
        var = identifier(name)
        lines.append(f"  VAR @{var}Value")
        lines.append(f"  SET @{var}Value = AttributeValue({quote(name)})")
    lines.append("]%%")
    return "\n".join(lines)


def email_validation_ampscript(variable: str = "email") -> str:
    """Normalize ``@<variable>`` and validate it as an email address.

    Sets ``@cleanEmail`` to the trimmed, lower-cased address, or to an empty
    string when the value is not a valid address.
    """
    var = identifier(variable)
    return f"""%%[
  /* Email Validation and Formatting */
  VAR @cleanEmail, @isValidEmail
  SET @cleanEmail = Trim(Lowercase(@{var}))
  SET @isValidEmail = IsEmailAddress(@cleanEmail)

  IF NOT @isValidEmail THEN
    SET @cleanEmail = ""
  ENDIF
]%%"""


def generate_dynamic_content(kind: str, options: Optional[Mapping[str, Any]] = None) -> str:
    """Dispatch to a standalone snippet by name.  Unknown kinds yield ``""``."""
    options = dict(options or {})
    if kind == "conditional-content":
        return conditional_content_ampscript(**options)
    if kind == "dynamic-list":
        return dynamic_list_ampscript(**options)
    if kind == "personalized-offers":
        return personalized_offers_ampscript(**options)
    return ""
