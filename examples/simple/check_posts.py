"""Endpoint check for the posts API.

Generate the client first:

    graphql-sonar generate --schema schema.graphql --operations operations --output sonar_client.py
"""
from graphql_sonar import assert_no_errors, load_environment, run

from sonar_client import fetchPosts

config = load_environment()


async def check_single_post():
    res = await fetchPosts(config, {"first": 1})
    posts = assert_no_errors(res).data["posts"]
    if len(posts) != 1:
        raise ValueError("Missing posts")

    [post] = posts
    if post["title"] != "My post":
        raise ValueError(f'Invalid title "{post["title"]}", expected "My post"')

    return res


if __name__ == "__main__":
    run([check_single_post])
