from io import BytesIO

import pytest
import requests
from PIL import Image

from common.errors import ExportError
from common.snapshot import (
    ImageRef, SnapshotExporter, decode_data_uri, export_file_name, proxy_url, to_data_uri,
)


def _png_bytes(color=(200, 30, 30)):
    buf = BytesIO()
    Image.new("RGB", (4, 4), color).save(buf, format="PNG")
    return buf.getvalue()


class FakeResponse:
    def __init__(self, content, content_type="image/png"):
        self.content = content
        self.headers = {"Content-Type": content_type}

    def raise_for_status(self):
        pass


class FakeSession:
    def __init__(self, fail=()):
        self.fail = set(fail)
        self.requested = []

    def get(self, url, timeout=None):
        self.requested.append(url)
        if any(f in url for f in self.fail):
            raise requests.ConnectionError("blocked")
        return FakeResponse(_png_bytes())


class FakeTarget:
    def __init__(self, srcs, fail_rasterize=False, fail_repaints=()):
        self.refs = [ImageRef(s) for s in srcs]
        self.fail_rasterize = fail_rasterize
        self.fail_repaints = set(fail_repaints)
        self.seen_during_raster = None
        self.repaints = 0

    def images(self):
        return list(self.refs)

    def repaint(self):
        self.repaints += 1
        if self.repaints in self.fail_repaints:
            raise Image.DecompressionBombError("image too large")

    def rasterize(self, scale, background):
        self.seen_during_raster = [r.src for r in self.refs]
        if self.fail_rasterize:
            raise RuntimeError("canvas is tainted")
        return Image.new("RGBA", (10 * scale, 10 * scale), (0, 0, 0, 0))


def _exporter(session):
    return SnapshotExporter(session=session, repaint_delay=0)


def test_sources_restored_when_one_fetch_fails(make_match):
    srcs = ["https://cdn.example/a.png", "https://cdn.example/broken.png", "https://cdn.example/c.png"]
    target = FakeTarget(srcs)
    result = _exporter(FakeSession(fail=["broken"])).export(target, make_match())

    assert [r.src for r in target.refs] == srcs
    during = target.seen_during_raster
    assert during[0].startswith("data:image/png;base64,")
    assert during[1] == srcs[1]
    assert during[2].startswith("data:image/png;base64,")
    assert result.mime == "image/jpeg"
    assert result.data[:2] == b"\xff\xd8"


def test_sources_restored_when_rasterize_fails(make_match):
    srcs = ["https://cdn.example/a.png"]
    target = FakeTarget(srcs, fail_rasterize=True)
    with pytest.raises(ExportError):
        _exporter(FakeSession()).export(target, make_match())
    assert [r.src for r in target.refs] == srcs
    assert target.repaints == 2


@pytest.mark.parametrize("fail_repaints", [{1}, {2}, {1, 2}])
def test_repaint_failures_become_export_errors(make_match, fail_repaints):
    srcs = ["https://cdn.example/a.png", "https://cdn.example/b.png"]
    target = FakeTarget(srcs, fail_repaints=fail_repaints)
    with pytest.raises(ExportError) as exc:
        _exporter(FakeSession()).export(target, make_match())
    assert [r.src for r in target.refs] == srcs
    assert target.repaints == 2
    if 1 in fail_repaints:
        assert "rendering" in str(exc.value)


def test_relative_sources_resolve_against_page(make_match):
    session = FakeSession()
    exporter = SnapshotExporter(session=session, repaint_delay=0, page_url="http://localhost:8501/")
    exporter.export(FakeTarget(["app/static/photos/x.png"]), make_match())
    assert session.requested == ["http://localhost:8501/app/static/photos/x.png"]


def test_data_sources_are_not_fetched():
    session = FakeSession()
    uri = to_data_uri(b"abc", "image/png")
    assert _exporter(session).inline_source(uri) == uri
    assert session.requested == []


def test_proxy_only_for_blocking_hosts():
    url = "https://firebasestorage.googleapis.com/v0/b/x/o/p.jpg?alt=media"
    proxied = proxy_url(url)
    assert proxied.startswith("https://images.weserv.nl/?url=")
    assert "firebasestorage.googleapis.com" in proxied
    assert proxy_url("https://cdn.example/a.png") == "https://cdn.example/a.png"


def test_data_uri_decoding():
    mime, data = decode_data_uri(to_data_uri(b"hello", "image/gif"))
    assert (mime, data) == ("image/gif", b"hello")
    with pytest.raises(ValueError):
        decode_data_uri("https://cdn.example/a.png")


def test_file_name_from_date_and_opponent(make_match):
    name = export_file_name(make_match(opponent="Yongsan FC/B", date="2024-05-04"))
    assert name == "MATCH_REPORT_2024-05-04_vs_Yongsan_FC_B.jpg"


def test_report_canvas_draws_inlined_photos(make_match):
    from common.report_canvas import ReportCanvas

    match = make_match(image_urls=("https://cdn.example/a.png", "https://cdn.example/b.png"),
                       scorers=[("Kim", 2)], player_count=12)
    canvas = ReportCanvas(match)
    session = FakeSession(fail=["b.png"])
    result = SnapshotExporter(session=session, scale=1, repaint_delay=0).export(canvas, match)

    assert [r.src for r in canvas.images()] == list(match.image_urls)
    with Image.open(BytesIO(result.data)) as im:
        assert im.format == "JPEG"
        assert im.width > 0
