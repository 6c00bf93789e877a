from .blog_post import BlogPost, PostView, UntrustedMarkup, trust_post_markup

__all__ = [
    "BlogPost",
    "PostView",
    "UntrustedMarkup",
    "trust_post_markup",
]
