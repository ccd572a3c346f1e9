#!/usr/bin/env python
"""Seed a fresh portfolio deployment with demo content via the client.

Usage:
    python scripts/seed_portfolio.py \
        --base-url http://localhost:8000 \
        --api-key $ADMIN_TOKEN
"""
from __future__ import annotations

import argparse
import asyncio
from datetime import datetime, timezone

from portfolio_client import ClientConfig, PortfolioClient, models as M
from portfolio_client.exceptions import PortfolioError


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Seed skills, social links, a project, work history and the profile."
    )
    parser.add_argument(
        "--base-url",
        default="http://localhost:8000",
        help="Portfolio API base URL (default: %(default)s)",
    )
    parser.add_argument(
        "--api-key",
        default=None,
        help="Admin bearer token, if the server has ADMIN_TOKEN set",
    )
    parser.add_argument(
        "--name",
        default="Jane Example",
        help="Profile name (default: %(default)s)",
    )
    return parser.parse_args()


async def ensure_skill(cli: PortfolioClient, existing: list[M.Skill], name: str, icon: str) -> M.Skill:
    for skill in existing:
        if skill.name == name:
            print(f"[info] Reusing skill {skill.id} ({name})")
            return skill
    skill = await cli.create_skill(M.SkillIn(name=name, icon=icon))
    print(f"[info] Created skill {skill.id} ({name})")
    return skill


async def seed(args: argparse.Namespace) -> None:
    async with PortfolioClient(ClientConfig(base_url=args.base_url, api_key=args.api_key)) as cli:
        if await cli.list_profiles():
            raise SystemExit("[info] A profile already exists; nothing to seed")

        skills = await cli.list_skills()
        react = await ensure_skill(cli, skills, "react", "devicon-react-original")
        node = await ensure_skill(cli, skills, "Node.js", "devicon-nodejs-plain")

        links = [
            await cli.create_social_link(M.SocialLinkIn(name="linkedin", url="https://linkedin.com/in/example")),
            await cli.create_social_link(M.SocialLinkIn(name="github", url="https://github.com/example")),
        ]

        project = await cli.create_project(M.ProjectIn(
            title="Portfolio Website",
            description="Website showcasing my projects.",
            features=["Profile", "Projects", "Contact"],
            technologies=["React", "Typescript", "TailwindCSS"],
            github_url="https://github.com/example/portfolio",
            live_url="https://portfolio.example.com",
            skill_ids=[react.id, node.id],
        ))
        print(f"[info] Created project {project.id}")

        jobs = [
            await cli.create_work_history(M.WorkHistoryIn(
                position="Frontend Developer",
                employment_type="Full-time",
                company="Example Ltd.",
                location="Jakarta",
                location_type="Remote",
                description=["Built web applications", "Implemented UI/UX designs"],
                start_date=datetime(2022, 1, 1, tzinfo=timezone.utc),
                skill_ids=[react.id],
            )),
            await cli.create_work_history(M.WorkHistoryIn(
                position="Backend Developer",
                employment_type="Contract",
                company="Sample Corp.",
                location="Surabaya",
                location_type="On-site",
                description=["Built mobile backends", "Deployed services"],
                start_date=datetime(2020, 6, 1, tzinfo=timezone.utc),
                end_date=datetime(2021, 12, 31, tzinfo=timezone.utc),
                skill_ids=[node.id],
            )),
        ]

        profile = await cli.create_profile(M.ProfileIn(
            name=args.name,
            headline="Software Engineer",
            bio="I build modern web applications.",
            skill_ids=[react.id, node.id],
            social_link_ids=[link.id for link in links],
            project_ids=[project.id],
            work_history_ids=[job.id for job in jobs],
        ))
        print(f"[info] Created profile {profile.id} with {len(profile.work_history)} positions")


def main() -> None:
    args = parse_args()
    try:
        asyncio.run(seed(args))
    except PortfolioError as exc:
        raise SystemExit(f"Seeding failed: {exc}") from exc


if __name__ == "__main__":
    main()
