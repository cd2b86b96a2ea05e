from blogapi.config import get_settings
from blogapi.database import SessionLocal, engine, Base
from blogapi.models import Comment, Post, PostLike, CommentLike, ProfileInfo, User
from blogapi.models.user import ROLE_ADMIN
from blogapi.repositories import ProfileRepository
from blogapi.schemas.posts import PostCreate
from blogapi.services import PostService

settings = get_settings()

# Create tables
Base.metadata.create_all(bind=engine)

db = SessionLocal()

# Clear existing content (users and sessions are kept)
db.query(CommentLike).delete()
db.query(PostLike).delete()
db.query(Comment).delete()
db.query(Post).delete()
db.query(ProfileInfo).delete()
db.commit()

# Default profile
ProfileRepository(db).save(
    name=settings.profile_name,
    description=settings.profile_description,
    photo_url=None,
    activity="",
    contacts={"email": None, "github": None, "linkedin": None, "vk": None},
)
db.commit()

# Author account
author_email = settings.admin_emails[0] if settings.admin_emails else "author@localhost"
author = db.query(User).filter(User.email == author_email).first()
if author is None:
    author = User(email=author_email, name=settings.profile_name, role=ROLE_ADMIN)
    db.add(author)
    db.commit()
    db.refresh(author)

# Sample posts
posts = [
    PostCreate(
        title="Welcome to the blog",
        content="This is the first post. Sign in with Google, GitHub or VK to like posts and join the discussion.",
        preview="A short hello and what to expect here.",
        published=True,
    ),
    PostCreate(
        title="Drafting in Markdown",
        content="Posts are written in **Markdown**. Reading time is estimated from the text, code blocks excluded.",
        preview="How posts are written.",
        published=True,
    ),
    PostCreate(
        title="Work in progress",
        content="This draft is only visible to admins until it is published.",
        published=False,
    ),
]

service = PostService(db)
created = [service.create_post(p, author) for p in posts]

print("Database seeded successfully!")
print(f"  - Profile for {settings.profile_name}")
print(f"  - Author {author.email} (admin)")
print(f"  - {len(created)} posts ({sum(1 for p in created if p.published)} published)")

db.close()
