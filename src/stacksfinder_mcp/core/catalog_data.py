"""Static technology catalog.

Scores are per dimension, 0-100, in the order performance, developer
experience, ecosystem, maintainability, cost, compliance. Compatibility and
conflict lists are declared per record and are not mirrored automatically.
"""

from __future__ import annotations

from .models import Category, Dimension

DATA_VERSION = "2025.12.30"


def _scores(perf: int, dx: int, ecosystem: int, maintain: int, cost: int, compliance: int) -> dict[Dimension, int]:
    return {
        Dimension.PERFORMANCE: perf,
        Dimension.DEVELOPER_EXPERIENCE: dx,
        Dimension.ECOSYSTEM: ecosystem,
        Dimension.MAINTAINABILITY: maintain,
        Dimension.COST: cost,
        Dimension.COMPLIANCE: compliance,
    }


TECHNOLOGY_RECORDS: list[dict] = [
    # Frontend
    {"id": "react", "name": "React", "category": Category.FRONTEND, "url": "https://react.dev", "scores": _scores(82, 85, 98, 80, 85, 82), "compatible_with": ["nextjs", "remix", "astro", "express", "fastify", "vercel", "netlify", "clerk", "auth0"]},
    {"id": "vue", "name": "Vue", "category": Category.FRONTEND, "url": "https://vuejs.org", "scores": _scores(86, 88, 88, 84, 88, 80), "compatible_with": ["nuxt", "astro", "express", "vercel", "netlify"]},
    {"id": "svelte", "name": "Svelte", "category": Category.FRONTEND, "url": "https://svelte.dev", "scores": _scores(94, 90, 74, 84, 90, 76), "compatible_with": ["sveltekit", "astro", "vercel", "netlify"]},
    {"id": "angular", "name": "Angular", "category": Category.FRONTEND, "url": "https://angular.dev", "scores": _scores(78, 66, 85, 86, 78, 92), "compatible_with": ["nestjs", "express", "auth0", "aws"]},
    {"id": "solid", "name": "SolidJS", "category": Category.FRONTEND, "url": "https://www.solidjs.com", "scores": _scores(96, 82, 60, 78, 90, 70), "compatible_with": ["astro", "netlify", "vercel"]},
    # Backend
    {"id": "express", "name": "Express", "category": Category.BACKEND, "url": "https://expressjs.com", "scores": _scores(70, 82, 96, 72, 92, 78), "compatible_with": ["postgres", "mysql", "mongodb", "prisma", "drizzle", "mongoose", "typeorm", "railway", "render", "fly", "aws", "auth0", "stripe"]},
    {"id": "fastify", "name": "Fastify", "category": Category.BACKEND, "url": "https://fastify.dev", "scores": _scores(92, 84, 78, 82, 92, 80), "compatible_with": ["postgres", "prisma", "drizzle", "railway", "fly", "render"]},
    {"id": "hono", "name": "Hono", "category": Category.BACKEND, "url": "https://hono.dev", "scores": _scores(95, 88, 62, 82, 95, 72), "compatible_with": ["cloudflare", "drizzle", "turso", "neon", "better-auth"]},
    {"id": "nestjs", "name": "NestJS", "category": Category.BACKEND, "url": "https://nestjs.com", "scores": _scores(80, 76, 86, 90, 84, 90), "compatible_with": ["postgres", "mysql", "typeorm", "prisma", "mongoose", "aws", "auth0"]},
    {"id": "django", "name": "Django", "category": Category.BACKEND, "url": "https://www.djangoproject.com", "scores": _scores(72, 84, 92, 88, 88, 94), "compatible_with": ["postgres", "mysql", "sqlite", "render", "railway", "aws", "stripe"]},
    {"id": "fastapi", "name": "FastAPI", "category": Category.BACKEND, "url": "https://fastapi.tiangolo.com", "scores": _scores(90, 90, 82, 84, 92, 84), "compatible_with": ["postgres", "sqlalchemy", "sqlite", "fly", "render", "railway"]},
    {"id": "rails", "name": "Ruby on Rails", "category": Category.BACKEND, "url": "https://rubyonrails.org", "scores": _scores(64, 90, 86, 84, 84, 88), "compatible_with": ["postgres", "mysql", "render", "fly", "stripe"]},
    # Meta-frameworks
    {"id": "nextjs", "name": "Next.js", "category": Category.META_FRAMEWORK, "url": "https://nextjs.org", "scores": _scores(88, 86, 97, 80, 78, 86), "compatible_with": ["react", "vercel", "netlify", "prisma", "drizzle", "clerk", "authjs", "better-auth", "supabase", "supabase-auth", "neon", "planetscale", "postgres", "stripe"]},
    {"id": "sveltekit", "name": "SvelteKit", "category": Category.META_FRAMEWORK, "url": "https://kit.svelte.dev", "scores": _scores(93, 92, 74, 86, 88, 78), "compatible_with": ["svelte", "vercel", "netlify", "cloudflare", "drizzle", "prisma", "lucia", "authjs", "supabase"]},
    {"id": "nuxt", "name": "Nuxt", "category": Category.META_FRAMEWORK, "url": "https://nuxt.com", "scores": _scores(86, 88, 82, 84, 86, 80), "compatible_with": ["vue", "vercel", "netlify", "cloudflare", "prisma", "drizzle", "supabase"]},
    {"id": "remix", "name": "Remix", "category": Category.META_FRAMEWORK, "url": "https://remix.run", "scores": _scores(88, 84, 76, 84, 86, 80), "compatible_with": ["react", "vercel", "fly", "cloudflare", "prisma", "drizzle"]},
    {"id": "astro", "name": "Astro", "category": Category.META_FRAMEWORK, "url": "https://astro.build", "scores": _scores(96, 88, 78, 86, 94, 78), "compatible_with": ["react", "vue", "svelte", "solid", "netlify", "vercel", "cloudflare"]},
    # Databases
    {"id": "postgres", "name": "PostgreSQL", "category": Category.DATABASE, "url": "https://www.postgresql.org", "scores": _scores(88, 82, 96, 92, 90, 96), "compatible_with": ["prisma", "drizzle", "typeorm", "sqlalchemy", "django", "rails", "railway", "render", "aws"], "conflicts_with": ["mongoose"]},
    {"id": "mysql", "name": "MySQL", "category": Category.DATABASE, "url": "https://www.mysql.com", "scores": _scores(84, 78, 92, 86, 90, 90), "compatible_with": ["prisma", "drizzle", "typeorm", "sqlalchemy"], "conflicts_with": ["mongoose"]},
    {"id": "mongodb", "name": "MongoDB", "category": Category.DATABASE, "url": "https://www.mongodb.com", "scores": _scores(82, 86, 90, 76, 78, 84), "compatible_with": ["mongoose", "prisma", "express", "nestjs"], "conflicts_with": ["drizzle", "sqlalchemy"]},
    {"id": "sqlite", "name": "SQLite", "category": Category.DATABASE, "url": "https://sqlite.org", "scores": _scores(90, 90, 88, 90, 98, 70), "compatible_with": ["drizzle", "prisma", "sqlalchemy", "django", "fly"], "conflicts_with": ["mongoose"]},
    {"id": "supabase", "name": "Supabase", "category": Category.DATABASE, "url": "https://supabase.com", "scores": _scores(82, 92, 84, 82, 86, 84), "compatible_with": ["nextjs", "sveltekit", "nuxt", "supabase-auth", "prisma", "drizzle", "vercel"]},
    {"id": "planetscale", "name": "PlanetScale", "category": Category.DATABASE, "url": "https://planetscale.com", "scores": _scores(90, 86, 72, 84, 64, 90), "compatible_with": ["prisma", "drizzle", "nextjs", "vercel"]},
    {"id": "neon", "name": "Neon", "category": Category.DATABASE, "url": "https://neon.tech", "scores": _scores(86, 90, 74, 84, 88, 86), "compatible_with": ["prisma", "drizzle", "nextjs", "vercel", "hono"]},
    {"id": "turso", "name": "Turso", "category": Category.DATABASE, "url": "https://turso.tech", "scores": _scores(92, 86, 58, 80, 92, 72), "compatible_with": ["drizzle", "hono", "cloudflare", "fly"]},
    # ORMs
    {"id": "prisma", "name": "Prisma", "category": Category.ORM, "url": "https://www.prisma.io", "scores": _scores(72, 92, 92, 86, 86, 84), "compatible_with": ["postgres", "mysql", "mongodb", "sqlite", "nextjs", "nestjs", "express", "planetscale", "neon", "supabase"]},
    {"id": "drizzle", "name": "Drizzle ORM", "category": Category.ORM, "url": "https://orm.drizzle.team", "scores": _scores(94, 88, 76, 84, 94, 80), "compatible_with": ["postgres", "mysql", "sqlite", "turso", "neon", "planetscale", "supabase", "nextjs", "sveltekit", "hono", "cloudflare"], "conflicts_with": ["mongodb"]},
    {"id": "typeorm", "name": "TypeORM", "category": Category.ORM, "url": "https://typeorm.io", "scores": _scores(70, 70, 80, 64, 88, 80), "compatible_with": ["nestjs", "postgres", "mysql", "express"]},
    {"id": "sqlalchemy", "name": "SQLAlchemy", "category": Category.ORM, "url": "https://www.sqlalchemy.org", "scores": _scores(80, 78, 90, 90, 94, 88), "compatible_with": ["fastapi", "postgres", "mysql", "sqlite"], "conflicts_with": ["mongodb"]},
    {"id": "mongoose", "name": "Mongoose", "category": Category.ORM, "url": "https://mongoosejs.com", "scores": _scores(74, 84, 86, 78, 92, 78), "compatible_with": ["mongodb", "express", "nestjs"], "conflicts_with": ["postgres", "mysql", "sqlite"]},
    # Auth
    {"id": "clerk", "name": "Clerk", "category": Category.AUTH, "url": "https://clerk.com", "scores": _scores(86, 94, 80, 86, 62, 90), "compatible_with": ["nextjs", "react", "remix", "vercel"]},
    {"id": "auth0", "name": "Auth0", "category": Category.AUTH, "url": "https://auth0.com", "scores": _scores(82, 78, 90, 86, 48, 98), "compatible_with": ["react", "angular", "express", "nestjs", "nextjs"]},
    {"id": "authjs", "name": "Auth.js", "category": Category.AUTH, "url": "https://authjs.dev", "scores": _scores(84, 80, 84, 76, 96, 82), "compatible_with": ["nextjs", "sveltekit", "prisma", "drizzle"]},
    {"id": "lucia", "name": "Lucia", "category": Category.AUTH, "url": "https://lucia-auth.com", "scores": _scores(90, 76, 56, 70, 98, 76), "compatible_with": ["sveltekit", "drizzle", "prisma"]},
    {"id": "supabase-auth", "name": "Supabase Auth", "category": Category.AUTH, "url": "https://supabase.com/auth", "scores": _scores(84, 88, 78, 84, 88, 86), "compatible_with": ["supabase", "nextjs", "sveltekit", "nuxt"]},
    {"id": "better-auth", "name": "Better Auth", "category": Category.AUTH, "url": "https://www.better-auth.com", "scores": _scores(88, 88, 62, 82, 98, 80), "compatible_with": ["nextjs", "sveltekit", "nuxt", "drizzle", "prisma"]},
    # Hosting
    {"id": "vercel", "name": "Vercel", "category": Category.HOSTING, "url": "https://vercel.com", "scores": _scores(90, 96, 90, 88, 64, 88), "compatible_with": ["nextjs", "sveltekit", "nuxt", "remix", "astro", "react", "vue", "svelte", "neon", "supabase", "planetscale"], "conflicts_with": ["django", "rails"]},
    {"id": "netlify", "name": "Netlify", "category": Category.HOSTING, "url": "https://www.netlify.com", "scores": _scores(84, 90, 82, 86, 76, 84), "compatible_with": ["astro", "nuxt", "sveltekit", "react", "vue", "svelte", "remix"], "conflicts_with": ["django", "rails"]},
    {"id": "cloudflare", "name": "Cloudflare Pages & Workers", "category": Category.HOSTING, "url": "https://pages.cloudflare.com", "scores": _scores(96, 82, 80, 84, 94, 86), "compatible_with": ["hono", "astro", "sveltekit", "remix", "nuxt", "drizzle", "turso"], "conflicts_with": ["django", "rails", "mongoose"]},
    {"id": "railway", "name": "Railway", "category": Category.HOSTING, "url": "https://railway.app", "scores": _scores(82, 92, 66, 82, 84, 76), "compatible_with": ["express", "fastify", "django", "fastapi", "postgres", "mysql"]},
    {"id": "fly", "name": "Fly.io", "category": Category.HOSTING, "url": "https://fly.io", "scores": _scores(88, 80, 70, 80, 84, 80), "compatible_with": ["fastify", "fastapi", "rails", "remix", "sqlite", "turso"]},
    {"id": "render", "name": "Render", "category": Category.HOSTING, "url": "https://render.com", "scores": _scores(80, 88, 70, 84, 82, 82), "compatible_with": ["express", "django", "fastapi", "rails", "postgres"]},
    {"id": "aws", "name": "AWS", "category": Category.HOSTING, "url": "https://aws.amazon.com", "scores": _scores(92, 62, 98, 80, 70, 98), "compatible_with": ["nestjs", "express", "django", "angular", "postgres", "mysql"]},
    # Payments
    {"id": "stripe", "name": "Stripe", "category": Category.PAYMENTS, "url": "https://stripe.com", "scores": _scores(90, 92, 98, 90, 74, 98), "compatible_with": ["nextjs", "express", "django", "rails"]},
    {"id": "lemonsqueezy", "name": "Lemon Squeezy", "category": Category.PAYMENTS, "url": "https://www.lemonsqueezy.com", "scores": _scores(84, 90, 62, 82, 70, 90), "compatible_with": ["nextjs", "sveltekit"]},
    {"id": "paddle", "name": "Paddle", "category": Category.PAYMENTS, "url": "https://www.paddle.com", "scores": _scores(84, 80, 70, 84, 72, 96), "compatible_with": ["nextjs"]},
]
