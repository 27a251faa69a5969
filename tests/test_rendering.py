from coreason_playground.models import RunFailure, RunResult
from coreason_playground.rendering import Jinja2Renderer


def test_full_document_embeds_loader_and_artifact() -> None:
    renderer = Jinja2Renderer()
    result = RunResult(run_id=2, encoded_artifact="AGFzbQEAAAA=", origin_url="https://play.example.com")

    html = renderer.render_result(result, "const x = a < b && c;", partial=False)

    # The loader script is inserted raw; everything else is escaped.
    assert "<script>const x = a < b && c;</script>" in html
    assert '<base href="https://play.example.com/">' in html
    assert 'const encoded = "AGFzbQEAAAA=";' in html
    assert 'data-run-id="2"' in html


def test_partial_wraps_document_in_iframe() -> None:
    renderer = Jinja2Renderer()
    result = RunResult(run_id=5, encoded_artifact="AA==", origin_url="http://localhost")

    html = renderer.render_result(result, "", partial=True)

    assert html.startswith('<div class="run-item" id="run-5"')
    assert 'sandbox="allow-scripts"' in html
    assert 'srcdoc="&lt;!DOCTYPE html&gt;' in html


def test_origin_is_escaped() -> None:
    renderer = Jinja2Renderer()
    result = RunResult(run_id=1, encoded_artifact="", origin_url='http://"evil')

    html = renderer.render_result(result, "", partial=False)

    assert 'href="http://&#34;evil/"' in html


def test_failure_escapes_diagnostics() -> None:
    renderer = Jinja2Renderer()
    failure = RunFailure(run_id=3, diagnostic_text="<script>alert(1)</script>", kind="build")

    html = renderer.render_failure(failure)

    assert "<script>" not in html
    assert "&lt;script&gt;alert(1)&lt;/script&gt;" in html
    assert 'data-kind="build"' in html
    assert 'id="run-3"' in html
