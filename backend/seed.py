import asyncio
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from pifa_league.db import database_url
from pifa_league.models import Competition, Player

engine = create_async_engine(database_url(), echo=False, pool_pre_ping=True)
Session = sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

async def main():
    async with Session() as s:
        existing_competitions = {
            x.id for x in (await s.execute(select(Competition))).scalars().all()
        }
        for cid, name in [("pifa-season-1", "PIFA League Season 1")]:
            if cid not in existing_competitions:
                s.add(Competition(id=cid, name=name))
        await s.commit()

        existing_players = {
            x.id for x in (await s.execute(select(Player))).scalars().all()
        }
        players = [
            Player(id="league-admin", name="League Admin", role="admin"),
            Player(id="alex-ruiz", name="Alex Ruiz", nickname="Alex"),
            Player(id="bella-fernandez", name="Bella Fernandez", nickname="Bella"),
            Player(id="carlos-mendez", name="Carlos Mendez", nickname="Carlos"),
            Player(id="diana-soto", name="Diana Soto", nickname="Diana"),
            Player(id="eli-vasquez", name="Eli Vasquez", nickname="Eli"),
        ]
        for p in players:
            if p.id not in existing_players:
                s.add(p)
        await s.commit()

if __name__ == "__main__":
    asyncio.run(main())
