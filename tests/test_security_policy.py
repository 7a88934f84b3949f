from avatarguard.tools.security_policy import (
    css_findings,
    is_allowed_attribute,
    is_allowed_element,
    is_local_reference,
    is_safe_class,
    is_safe_css_value,
    is_safe_font_family,
    is_safe_id,
    is_safe_meta_url,
    is_safe_name,
    is_safe_url,
)


def test_safe_url_accepts_local_fragment_and_image_data_uris():
    assert is_safe_url("#myElement")
    assert is_safe_url("data:image/png;base64,iVBORw0KGgo=")
    assert is_safe_url("data:image/jpeg;base64,/9j/4AAQ=")
    assert is_safe_url("DATA:IMAGE/PNG;BASE64,iVBORw0KGgo=")


def test_safe_url_rejects_bare_hash_and_external_schemes():
    for url in (
        "#",
        "https://example.com/img.png",
        "http://example.com/img.png",
        "ftp://example.com/img.png",
        "//example.com/img.png",
        "file:///etc/passwd",
        "javascript:alert(1)",
        "JavaScript:alert(1)",
        "vbscript:MsgBox(1)",
        " javascript:alert(1)",
        "\tjavascript:alert(1)",
    ):
        assert not is_safe_url(url), url


def test_safe_url_rejects_unsafe_data_uris():
    for url in (
        "data:image/svg;base64,PHN2Zz4=",
        "data:image/svg+xml;base64,PHN2Zz4=",
        "data:text/html;base64,PHNjcmlwdD4=",
        "data:application/xml;base64,PHN2Zz4=",
        "data:image/png,rawcontent",
        " data:image/png;base64,iVBORw0KGgo=",
    ):
        assert not is_safe_url(url), url


def test_safe_url_rejects_trailing_newline_and_non_strings():
    assert not is_safe_url("#id\n")
    assert not is_safe_url(None)
    assert not is_safe_url(123)


def test_meta_url_policy_only_allows_http_and_https():
    assert is_safe_meta_url("https://opensource.org/license/mit")
    assert is_safe_meta_url("http://example.com")
    assert is_safe_meta_url("HTTPS://example.com/path?q=1")
    assert not is_safe_meta_url("javascript:alert(1)")
    assert not is_safe_meta_url("data:text/html,<script>alert(1)</script>")
    assert not is_safe_meta_url("file:///etc/passwd")
    assert not is_safe_meta_url("//evil.com/steal")
    assert not is_safe_meta_url("https://")
    assert not is_safe_meta_url(" https://example.com")


def test_css_accepts_plain_declarations_and_local_urls():
    assert is_safe_css_value("fill:red; stroke:blue")
    assert is_safe_css_value("opacity:0.5")
    assert is_safe_css_value("fill: url(#myGradient)")
    assert is_safe_css_value(".cls { fill: url('#gradient'); }")
    assert is_safe_css_value("blur(5px)")


def test_css_rejects_known_injection_constructs():
    for css in (
        "@import url(https://evil.com/steal.css)",
        "@font-face { src: url('https://evil.com/font.woff'); }",
        "width: expression(alert(1))",
        "-moz-binding: url(https://evil.com/xbl)",
        "behavior: url(https://evil.com/xss.htc)",
        "background: url(https://evil.com/steal)",
        "background: URL(https://evil.com/steal)",
        "background: Url(https://evil.com/steal)",
        "background: url (https://evil.com/x)",
        "background: \\75\\72\\6C(https://evil.com)",
        "\\75rl(https://evil.com/c.svg#c)",
        "u\\rl(https://evil.com)",
        "url(data:image/svg+xml,...)",
        "url(javascript:alert(1))",
        "background: url(#ok",
        "</style><script>alert(1)</script>",
    ):
        assert not is_safe_css_value(css), css


def test_css_findings_name_each_problem():
    findings = css_findings("@import url(https://evil.com/a.css); width: expression(1)")
    assert "@import" in findings
    assert "expression()" in findings
    assert any(finding.startswith("non-local url(") for finding in findings)


def test_local_reference_requires_an_identifier():
    assert is_local_reference("#arrow")
    assert not is_local_reference("#")
    assert not is_local_reference("#a b")
    assert not is_local_reference("arrow")


def test_name_pattern():
    assert is_safe_name("head")
    assert is_safe_name("_private")
    assert is_safe_name("skinColor")
    assert is_safe_name("eye-left_2")
    assert not is_safe_name("Head")
    assert not is_safe_name("1head")
    assert not is_safe_name("")
    assert not is_safe_name("Invalid Name")
    assert not is_safe_name("a<b")
    assert not is_safe_name('a"b')
    assert not is_safe_name("head\n")


def test_id_and_class_patterns():
    assert is_safe_id("myElement")
    assert is_safe_id("_my-element.v2")
    assert not is_safe_id("1invalid")
    assert not is_safe_id("my element")
    assert not is_safe_id('a"onload="alert(1)')
    assert is_safe_class("my-class")
    assert is_safe_class("class1 class2")
    assert not is_safe_class("a{color:red}")
    assert not is_safe_class('<img src=x onerror="alert(1)">')


def test_font_family_pattern():
    assert is_safe_font_family("Times New Roman")
    assert is_safe_font_family("Noto-Sans")
    assert not is_safe_font_family("Arial; color: red")
    assert not is_safe_font_family("expression(alert(1))")
    assert not is_safe_font_family("")


def test_element_allow_list():
    for name in ("g", "rect", "path", "style", "tspan", "linearGradient", "feGaussianBlur"):
        assert is_allowed_element(name), name
    for name in (
        "script",
        "foreignObject",
        "a",
        "animate",
        "animateTransform",
        "animateMotion",
        "set",
        "iframe",
        "object",
        "embed",
        "feImage",
        "div",
    ):
        assert not is_allowed_element(name), name


def test_attribute_allow_list():
    assert is_allowed_attribute("d")
    assert is_allowed_attribute("fill")
    assert is_allowed_attribute("href")
    assert not is_allowed_attribute("onclick")
    assert not is_allowed_attribute("ONLOAD")
    assert not is_allowed_attribute("xlink:href")
    assert not is_allowed_attribute("XLINK:href")
    assert not is_allowed_attribute("xmlns")
    assert not is_allowed_attribute("xml:base")
    assert not is_allowed_attribute("__proto__")
    assert not is_allowed_attribute("constructor")
    assert not is_allowed_attribute("unknownProp")
