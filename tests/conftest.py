"""Shared test fixtures for the wordpress_migrator test suite."""

from __future__ import annotations

import pytest

WXR_HEADER = """<?xml version="1.0" encoding="UTF-8" ?>
<rss version="2.0"
    xmlns:excerpt="http://wordpress.org/export/1.2/excerpt/"
    xmlns:content="http://purl.org/rss/1.0/modules/content/"
    xmlns:wfw="http://wellformedweb.org/CommentAPI/"
    xmlns:dc="http://purl.org/dc/elements/1.1/"
    xmlns:wp="http://wordpress.org/export/1.2/">
<channel>
    <title>Old Blog</title>
    <link>https://old.example.com/</link>
    <description>Just another WordPress site</description>
    <wp:wxr_version>1.2</wp:wxr_version>
    <wp:base_site_url>https://old.example.com</wp:base_site_url>
"""

WXR_FOOTER = """</channel>
</rss>
"""

AUTHORS = """
    <wp:author>
        <wp:author_id>1</wp:author_id>
        <wp:author_login><![CDATA[alice]]></wp:author_login>
        <wp:author_email><![CDATA[alice@example.com]]></wp:author_email>
        <wp:author_display_name><![CDATA[Alice Author]]></wp:author_display_name>
    </wp:author>
    <wp:author>
        <wp:author_id>2</wp:author_id>
        <wp:author_login><![CDATA[bob]]></wp:author_login>
        <wp:author_email><![CDATA[bob@example.com]]></wp:author_email>
        <wp:author_display_name><![CDATA[Bob Builder]]></wp:author_display_name>
    </wp:author>
"""


def wxr_attachment(post_id, url, title="", alt=None, status="inherit"):
    """Return the XML of an attachment item."""
    meta = ""
    if alt is not None:
        meta = f"""
        <wp:postmeta>
            <wp:meta_key><![CDATA[_wp_attachment_image_alt]]></wp:meta_key>
            <wp:meta_value><![CDATA[{alt}]]></wp:meta_value>
        </wp:postmeta>"""
    return f"""
    <item>
        <title><![CDATA[{title}]]></title>
        <link>https://old.example.com/?attachment_id={post_id}</link>
        <dc:creator><![CDATA[alice]]></dc:creator>
        <description></description>
        <content:encoded><![CDATA[]]></content:encoded>
        <wp:post_id>{post_id}</wp:post_id>
        <wp:post_date><![CDATA[2024-01-01 09:00:00]]></wp:post_date>
        <wp:status><![CDATA[{status}]]></wp:status>
        <wp:post_type><![CDATA[attachment]]></wp:post_type>
        <wp:attachment_url><![CDATA[{url}]]></wp:attachment_url>{meta}
    </item>"""


def wxr_comment(comment_id, parent="0", approved="1", author="Visitor",
                email="visitor@example.net", content="Nice post!",
                date="2024-01-05 12:00:00"):
    """Return the XML of a ``wp:comment`` element."""
    return f"""
        <wp:comment>
            <wp:comment_id>{comment_id}</wp:comment_id>
            <wp:comment_author><![CDATA[{author}]]></wp:comment_author>
            <wp:comment_author_email><![CDATA[{email}]]></wp:comment_author_email>
            <wp:comment_author_url>https://visitor.example.net</wp:comment_author_url>
            <wp:comment_date><![CDATA[{date}]]></wp:comment_date>
            <wp:comment_content><![CDATA[{content}]]></wp:comment_content>
            <wp:comment_approved><![CDATA[{approved}]]></wp:comment_approved>
            <wp:comment_parent>{parent}</wp:comment_parent>
        </wp:comment>"""


def wxr_post(post_id, title, slug, date="2024-01-01 10:00:00", creator="alice",
             content="<p>Body</p>", status="publish", post_type="post",
             categories=(), tags=(), thumbnail=None, comments="", description=""):
    """Return the XML of a post or page item."""
    terms = "".join(
        f'\n        <category domain="category" nicename="{c.lower()}"><![CDATA[{c}]]></category>'
        for c in categories
    ) + "".join(
        f'\n        <category domain="post_tag" nicename="{t.lower()}"><![CDATA[{t}]]></category>'
        for t in tags
    )
    meta = ""
    if thumbnail is not None:
        meta = f"""
        <wp:postmeta>
            <wp:meta_key><![CDATA[_thumbnail_id]]></wp:meta_key>
            <wp:meta_value><![CDATA[{thumbnail}]]></wp:meta_value>
        </wp:postmeta>"""
    return f"""
    <item>
        <title><![CDATA[{title}]]></title>
        <link>https://old.example.com/{slug}/</link>
        <dc:creator><![CDATA[{creator}]]></dc:creator>
        <description>{description}</description>
        <content:encoded><![CDATA[{content}]]></content:encoded>
        <excerpt:encoded><![CDATA[]]></excerpt:encoded>
        <wp:post_id>{post_id}</wp:post_id>
        <wp:post_date><![CDATA[{date}]]></wp:post_date>
        <wp:post_modified><![CDATA[{date}]]></wp:post_modified>
        <wp:status><![CDATA[{status}]]></wp:status>
        <wp:post_type><![CDATA[{post_type}]]></wp:post_type>{terms}{meta}{comments}
    </item>"""


def build_wxr(*items, authors=AUTHORS):
    """Assemble a complete export document."""
    return WXR_HEADER + authors + "".join(items) + WXR_FOOTER


PHOTO_URL = "https://old.example.com/wp-content/uploads/2024/01/photo.jpg"
REMOTE_URL = "https://cdn.other.net/files/remote.png"

FIRST_POST_CONTENT = (
    '<!-- wp:paragraph --><p class="intro" data-block="1">Hello '
    '<img src="https://old.example.com/wp-content/uploads/2024/01/photo-300x200.jpg" /></p>'
    "<!-- /wp:paragraph --><p></p>"
    '<p><a href="https://old.example.com/about/">About</a></p>'
)


@pytest.fixture()
def sample_wxr():
    """Return a sample export: 3 posts, 2 categories, 1 tag, 2 attachments.

    One attachment is hosted on the exported site and one on another host.
    The first post carries threaded comments, including a reply whose
    parent appears later in the document and an unapproved comment.
    """
    comments = (
        wxr_comment(100, content="First!")
        + wxr_comment(101, parent="100", author="Alice Author",
                      email="alice@example.com", content="Thanks for reading")
        + wxr_comment(102, parent="103", content="Replying to a later comment")
        + wxr_comment(103, content="<b>Great</b> article, really enjoyed it a lot")
        + wxr_comment(104, approved="0", content="Buy cheap pills")
    )
    return build_wxr(
        wxr_attachment(10, PHOTO_URL, title="Photo", alt="A photo"),
        wxr_attachment(11, REMOTE_URL, title="Remote"),
        wxr_post(1, "First Post", "first-post", content=FIRST_POST_CONTENT,
                 categories=("News",), tags=("Python",), thumbnail=10,
                 comments=comments),
        wxr_post(2, "Second Post", "second-post", date="2024-01-02 10:00:00",
                 creator="bob", categories=("Tips",)),
        wxr_post(3, "Third Post", "third-post", date="2024-01-03 10:00:00",
                 categories=("News",)),
        wxr_post(4, "Draft Post", "draft-post", status="draft",
                 categories=("Unpublished",),
                 comments=wxr_comment(200)),
    )


@pytest.fixture()
def export_file(tmp_path, sample_wxr):
    """Write the sample export to disk and return its path."""
    path = tmp_path / "export.xml"
    path.write_text(sample_wxr, encoding="utf-8")
    return path
