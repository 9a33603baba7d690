"""Content classifier tests: rule order, payload extraction, fallbacks."""

from __future__ import annotations

import json

from ayanfe.content.classifier import ContentType, classify_content

AUDIO_URI = "data:audio/mpeg;base64,SUQzBAAAAAAAI1RTU0U="
VIDEO_URI = "data:video/mp4;base64,AAAAIGZ0eXBpc29t"
IMAGE_URI = "data:image/png;base64,iVBORw0KGgoAAAANSUhEUg=="


class TestAudio:
    """Audio JSON payloads and audio data URIs."""

    def test_audio_json_with_metadata(self):
        content = json.dumps({"audioData": AUDIO_URI, "title": "Song", "artist": "Band", "query": "play song"})
        parsed = classify_content(content)
        assert parsed.type == ContentType.AUDIO
        assert parsed.content == AUDIO_URI
        assert parsed.metadata == {"title": "Song", "artist": "Band", "query": "play song"}

    def test_audio_json_defaults(self):
        parsed = classify_content(json.dumps({"audioData": AUDIO_URI}))
        assert parsed.metadata == {"title": "Audio", "artist": "Unknown Artist"}

    def test_embedded_audio_data_uri(self):
        parsed = classify_content(f"Here you go: {AUDIO_URI} enjoy")
        assert parsed.type == ContentType.AUDIO
        assert parsed.content == AUDIO_URI
        assert parsed.metadata is None

    def test_malformed_json_falls_through_to_data_uri(self):
        content = '{"audioData": "' + AUDIO_URI + '", broken'
        parsed = classify_content(content)
        assert parsed.type == ContentType.AUDIO
        assert parsed.content == AUDIO_URI

    def test_malformed_audio_json_without_uri_is_text(self):
        parsed = classify_content('{"audioData": broken')
        assert parsed.type == ContentType.TEXT
        assert parsed.content == '{"audioData": broken'

    def test_audio_wins_over_image(self):
        content = json.dumps({"audioData": AUDIO_URI, "cover": IMAGE_URI})
        assert classify_content(content).type == ContentType.AUDIO


class TestVideo:
    """Video JSON payloads and video data URIs."""

    def test_video_data(self):
        parsed = classify_content(json.dumps({"videoData": VIDEO_URI, "title": "Clip"}))
        assert parsed.type == ContentType.VIDEO
        assert parsed.content == VIDEO_URI
        assert parsed.metadata == {"title": "Clip", "source": "Unknown Source"}

    def test_embedded_video_url(self):
        parsed = classify_content(json.dumps({"videoUrl": "https://x/v", "videoEmbed": True}))
        assert parsed.type == ContentType.VIDEO
        assert parsed.content == "https://x/v"
        assert parsed.metadata == {"title": "Video", "source": "Unknown Source", "isEmbedded": True}

    def test_bare_video_url_renders_as_markdown_caption(self):
        parsed = classify_content(json.dumps({"videoUrl": "https://x/v", "caption": "Nice"}))
        assert parsed.type == ContentType.MARKDOWN
        assert parsed.content == "\U0001f3ac Video URL: https://x/v\n\nNice"

    def test_malformed_video_json_is_text(self):
        content = '{"videoUrl": "https://x/v", oops'
        parsed = classify_content(content)
        assert parsed.type == ContentType.TEXT
        assert parsed.content == content

    def test_malformed_video_json_falls_through_to_data_uri(self):
        parsed = classify_content('{"videoData": "' + VIDEO_URI + '" oops')
        assert parsed.type == ContentType.VIDEO
        assert parsed.content == VIDEO_URI

    def test_video_data_uri(self):
        parsed = classify_content(f"video: {VIDEO_URI}")
        assert parsed.type == ContentType.VIDEO
        assert parsed.content == VIDEO_URI


class TestImage:
    """Markdown image syntax and image data URIs."""

    def test_markdown_image(self):
        parsed = classify_content("look ![a cat](http://i/cat.png)")
        assert parsed.type == ContentType.IMAGE
        assert parsed.content == "http://i/cat.png"
        assert parsed.metadata == {"alt": "a cat"}

    def test_image_data_uri(self):
        parsed = classify_content(f"generated {IMAGE_URI}")
        assert parsed.type == ContentType.IMAGE
        assert parsed.content == IMAGE_URI


class TestHtmlAndMarkdown:
    """HTML media fragments, markdown markers and long text."""

    def test_html_media_fragment(self):
        content = '<audio controls src="https://x/a.mp3"></audio>'
        parsed = classify_content(content)
        assert parsed.type == ContentType.HTML
        assert parsed.content == content

    def test_markdown_markers(self):
        assert classify_content("line one\nline two").type == ContentType.MARKDOWN
        assert classify_content("this is **bold**").type == ContentType.MARKDOWN
        assert classify_content("# Title").type == ContentType.MARKDOWN

    def test_long_text_is_markdown(self):
        assert classify_content("a" * 201).type == ContentType.MARKDOWN
        assert classify_content("a" * 200).type == ContentType.TEXT

    def test_plain_text(self):
        parsed = classify_content("hello")
        assert parsed.type == ContentType.TEXT
        assert parsed.content == "hello"
        assert parsed.metadata is None

    def test_non_object_json_is_text(self):
        assert classify_content("[1, 2, 3]").type == ContentType.TEXT
