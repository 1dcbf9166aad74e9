from __future__ import annotations

from .posts import NewPost


def sample_posts() -> list[NewPost]:
    return [
        NewPost(
            title="Welcome to Our Blog",
            content=(
                "# Welcome to Our Blog\n\n"
                "This is the first post. Posts can be created, edited and deleted "
                "from the admin view once you have signed in.\n\n"
                "## Getting Started\n\n"
                "Use the New Post button to write your first article. Tags and a "
                "featured image are optional.\n\nHappy blogging!"
            ),
            excerpt="Welcome to the blog! A quick tour of creating and managing posts.",
            author="Blog Admin",
            tags=["welcome", "getting-started", "blog"],
            featured=True,
            featured_image="https://images.unsplash.com/photo-1486312338219-ce68d2c6f44d?w=800&h=400&fit=crop&crop=center",
            image_alt="Laptop with blog content on screen",
        ),
        NewPost(
            title="How to Create Engaging Blog Content",
            content=(
                "# How to Create Engaging Blog Content\n\n"
                "## Know Your Audience\n\n"
                "Understand who you are writing for: their interests, the problems "
                "they face and the tone that resonates with them.\n\n"
                "## Structure Your Content\n\n"
                "1. Compelling headline\n2. Strong opening\n3. Clear sections\n"
                "4. Call to action\n\n"
                "## Use Visuals\n\n"
                "Images and charts make content easier to follow."
            ),
            excerpt="Strategies for writing blog content that keeps readers coming back.",
            author="Content Creator",
            tags=["content", "writing", "tips"],
            featured=False,
            featured_image="https://images.unsplash.com/photo-1455390582262-044cdead277a?w=800&h=400&fit=crop&crop=center",
            image_alt="Person writing in a notebook",
        ),
    ]
