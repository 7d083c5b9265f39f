import asyncio

import pytest

from xhsfeed import FetchError, NoteContent, StateShapeError
from xhsfeed.enrich import get_full_note, parse_detail, render_description
from xhsfeed.models import PostDetail


def _run(routes, link, mode, cache, **kwargs):
    async def run():
        async with routes.client() as client:
            return await get_full_note(client, link, mode, cache, **kwargs)
    return asyncio.run(run())


@pytest.fixture
def link(profile_url, note_ids):
    return f"{profile_url}/{note_ids[0]}"


@pytest.mark.unit
class Describe_render_description:
    def test_images_mode_should_render_only_images(self):
        """images 模式只输出图片标签。"""
        detail = PostDetail(title="t", desc="d", images=("a", "b"))
        assert render_description(detail, "images") == '<img src="a"><img src="b">'

    def test_fulltext_mode_should_append_title_and_text(self):
        """fulltext 模式在图片后追加标题与规范化正文。"""
        detail = PostDetail(title="杭州", desc="西湖[笑哭R]\n#旅行#", images=("a", "b"))
        assert render_description(detail, "fulltext") == (
            '<img src="a"><img src="b"><br>杭州<br>西湖<br>#旅行'
        )

    def test_given_no_images_should_start_with_break(self):
        """没有图片时描述以换行开头。"""
        assert render_description(PostDetail(title="t", desc="d"), "fulltext") == "<br>t<br>d"


@pytest.mark.unit
class Describe_parse_detail:
    def test_should_convert_millisecond_time(self):
        """毫秒时间戳应转换为 UTC 时间。"""
        detail = parse_detail({"title": "t", "desc": "", "imageList": [], "time": 1700000000000})
        assert detail.pub_date.isoformat() == "2023-11-14T22:13:20+00:00"

    def test_given_missing_time_should_leave_date_empty(self):
        """缺少时间时发布日期为空。"""
        assert parse_detail({"title": "t", "desc": "", "imageList": []}).pub_date is None

    def test_should_keep_image_order(self):
        """图片顺序应保持不变。"""
        note = {"title": "", "desc": "", "imageList": [{"urlDefault": "x"}, {"urlDefault": "y"}, {"urlDefault": None}]}
        assert parse_detail(note).images == ("x", "y")


@pytest.mark.unit
class Describe_parse_detail_shape:
    def test_given_missing_image_list_should_raise_shape_error(self):
        """缺少 imageList 时应抛出 StateShapeError。"""
        with pytest.raises(StateShapeError) as exc:
            parse_detail({"title": "t", "desc": "d"})
        assert exc.value.path == "note.imageList"

    def test_given_missing_title_should_raise_shape_error(self):
        """缺少 title 时应抛出 StateShapeError。"""
        with pytest.raises(StateShapeError) as exc:
            parse_detail({"desc": "d", "imageList": []})
        assert exc.value.path == "note.title"

    def test_given_missing_desc_should_raise_shape_error(self):
        """缺少 desc 时应抛出 StateShapeError。"""
        with pytest.raises(StateShapeError) as exc:
            parse_detail({"title": "t", "imageList": []})
        assert exc.value.path == "note.desc"

    def test_given_null_fields_should_mean_empty(self):
        """字段存在但为 null 时视为空值。"""
        detail = parse_detail({"title": None, "desc": None, "imageList": None})
        assert (detail.title, detail.desc, detail.images) == ("", "", ())

    def test_given_non_mapping_image_should_raise_shape_error(self):
        """imageList 中的非对象元素应抛出 StateShapeError。"""
        with pytest.raises(StateShapeError):
            parse_detail({"title": "t", "desc": "d", "imageList": ["a.jpg"]})


@pytest.mark.unit
class Describe_get_full_note:
    def test_fulltext_mode_should_build_content(self, mock_routes, make_note_page, link, note_ids, cache):
        """应抓取详情页并生成全文描述。"""
        page = make_note_page(note_ids[0], title="杭州三日游", desc="第一天\n#西湖#", images=("a", "b"))
        routes = mock_routes({link: page})
        content = _run(routes, link, "fulltext", cache, cookie="web_session=abc")
        assert content.title == "杭州三日游"
        assert content.description == '<img src="a"><img src="b"><br>杭州三日游<br>第一天<br>#西湖'
        assert content.pub_date.year == 2023
        assert routes.requests[0].headers["Cookie"] == "web_session=abc"

    def test_images_mode_should_skip_text(self, mock_routes, make_note_page, link, note_ids, cache):
        """images 模式不应追加标题与正文。"""
        routes = mock_routes({link: make_note_page(note_ids[0], title="t", desc="d", images=("a", "b"))})
        content = _run(routes, link, "images", cache)
        assert content.description == '<img src="a"><img src="b">'

    def test_should_populate_cache(self, mock_routes, make_note_page, link, note_ids, cache):
        """首次抓取后应以链接为键写入缓存。"""
        routes = mock_routes({link: make_note_page(note_ids[0], title="t")})
        content = _run(routes, link, "fulltext", cache)
        assert cache.get(link) == content

    def test_given_cached_link_should_not_fetch_again(self, mock_routes, make_note_page, link, note_ids, cache):
        """缓存命中时不应再次请求。"""
        routes = mock_routes({link: make_note_page(note_ids[0], title="t")})
        first = _run(routes, link, "fulltext", cache)
        second = _run(routes, link, "fulltext", cache)
        assert first == second
        assert len(routes.calls) == 1

    def test_given_prefilled_cache_should_return_entry_unchanged(self, mock_routes, link, cache):
        """预先存在的缓存条目应原样返回。"""
        entry = NoteContent(title="cached", description="<p>x</p>")
        cache.set(link, entry)
        routes = mock_routes({})
        assert _run(routes, link, "fulltext", cache) is entry
        assert routes.calls == []

    def test_given_http_error_should_raise_and_not_cache(self, mock_routes, link, cache):
        """抓取失败应抛出 FetchError 且不写缓存。"""
        routes = mock_routes({link: 503})
        with pytest.raises(FetchError):
            _run(routes, link, "fulltext", cache)
        assert cache.get(link) is None

    def test_given_missing_detail_should_raise_shape_error(self, mock_routes, make_state_page, link, cache):
        """详情结构缺失时应抛出 StateShapeError。"""
        routes = mock_routes({link: make_state_page('{"note":{"firstNoteId":"x","noteDetailMap":{}}}')})
        with pytest.raises(StateShapeError):
            _run(routes, link, "fulltext", cache)

    def test_given_incomplete_detail_should_raise_and_not_cache(self, mock_routes, make_state_page, link, cache):
        """详情字段不全时应失败，且不缓存空条目。"""
        state = '{"note":{"firstNoteId":"n1","noteDetailMap":{"n1":{"note":{"desc":"d"}}}}}'
        routes = mock_routes({link: make_state_page(state)})
        with pytest.raises(StateShapeError):
            _run(routes, link, "fulltext", cache)
        assert cache.get(link) is None
