"""
Initial data: roles, the default accounts and a little sample content.

Every function is idempotent; rows that already exist are left alone, so
seeding can run on every startup.
"""
import logging

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from forum.models import Category, Comment, Post, Role, User
from forum.repositories import RoleRepository, UserRepository
from forum.security import generate_salt, hash_password

logger = logging.getLogger(__name__)

ROLE_NAMES = ("User", "Moderator", "Admin")

# (first name, last name, email, password, role)
DEFAULT_USERS = [
    ("Admin", "ForumAdmin", "admin@gmail.com", "qwerty", "Admin"),
    ("User", "ForumUser", "alex@gmail.com", "123456789", "User"),
]

CATEGORIES = [
    ("Technology", "Discussions about the latest in technology, gadgets, software, and innovations."),
    ("Programming", "A place to discuss coding techniques, share code, and ask for help on various programming languages."),
    ("Gaming", "Discuss video games, platforms, and game development. Share tips, reviews, and news."),
    ("Science", "Explore the world of science, from physics to biology. Share discoveries, theories, and research."),
    ("General Discussion", "A casual space for general conversations on any topic not covered by other categories."),
]

# (title, content, author email, category name)
POSTS = [
    (
        "Latest iPhone Release",
        "What do you think about the latest iPhone release? Is it worth the upgrade?",
        "admin@gmail.com",
        "Technology",
    ),
    (
        "Python AttributeError Help",
        "Can anyone help me debug this Python code? I keep getting 'NoneType' object has no attribute.",
        "alex@gmail.com",
        "Programming",
    ),
    (
        "Baldur's Gate 3 Impressions",
        "Has anyone tried the new Baldur's Gate 3? How does it compare to Divinity: Original Sin 2?",
        "admin@gmail.com",
        "Gaming",
    ),
    (
        "James Webb Space Telescope Discoveries",
        "The James Webb Space Telescope has captured some amazing images of distant galaxies! Let's discuss the findings.",
        "alex@gmail.com",
        "Science",
    ),
    (
        "Remote Work - Future or Trend?",
        "What's everyone's opinion on remote work? Is it the future or a temporary trend?",
        "admin@gmail.com",
        "General Discussion",
    ),
]

# (post title, author email, content)
COMMENTS = [
    (
        "Latest iPhone Release",
        "admin@gmail.com",
        "I think the new iPhone is great, but the price is a bit high for the small upgrades.",
    ),
    (
        "Python AttributeError Help",
        "alex@gmail.com",
        "Check whether the function you call actually returns something. A missing return is the usual cause.",
    ),
    (
        "Baldur's Gate 3 Impressions",
        "admin@gmail.com",
        "Baldur's Gate 3 is amazing! The character customization and dialogue options are fantastic.",
    ),
]

REPLY = (
    "alex@gmail.com",
    "I agree with you! The price is really high, especially considering the minor improvements.",
)


async def seed_roles(db: AsyncSession) -> None:
    repo = RoleRepository(db)
    for name in ROLE_NAMES:
        if await repo.find_by_name(name) is None:
            await repo.add(Role(name=name))
            logger.info("Created role %s", name)


async def seed_users(db: AsyncSession) -> None:
    users = UserRepository(db)
    roles = RoleRepository(db)
    for first_name, last_name, email, password, role_name in DEFAULT_USERS:
        if await users.email_exists(email):
            continue
        role = await roles.find_by_name(role_name)
        salt = generate_salt()
        await users.add(
            User(
                first_name=first_name,
                last_name=last_name,
                email=email,
                salt=salt,
                hashed_password=hash_password(password, salt),
                role_id=role.id,
            )
        )
        logger.info("Created user %s", email)


async def _is_empty(db: AsyncSession, model) -> bool:
    return (await db.execute(select(func.count()).select_from(model))).scalar_one() == 0


async def seed_content(db: AsyncSession) -> None:
    """Sample categories, posts and comments (with one reply)."""
    users = UserRepository(db)
    user_ids = {email: (await users.get_by_email(email)).id for _, _, email, _, _ in DEFAULT_USERS}

    if await _is_empty(db, Category):
        db.add_all(Category(name=name, description=description) for name, description in CATEGORIES)
        await db.flush()

    if await _is_empty(db, Post):
        categories = {c.name: c.id for c in (await db.execute(select(Category))).scalars()}
        db.add_all(
            Post(title=title, content=content, user_id=user_ids[email], category_id=categories[category])
            for title, content, email, category in POSTS
        )
        await db.flush()

    if await _is_empty(db, Comment):
        posts = {p.title: p.id for p in (await db.execute(select(Post))).scalars()}
        comments = [
            Comment(content=content, post_id=posts[title], user_id=user_ids[email])
            for title, email, content in COMMENTS
        ]
        db.add_all(comments)
        await db.flush()

        parent = comments[0]
        email, content = REPLY
        db.add(
            Comment(
                content=content,
                post_id=parent.post_id,
                user_id=user_ids[email],
                parent_comment_id=parent.id,
            )
        )
        await db.flush()
    logger.info("Sample content seeded")
