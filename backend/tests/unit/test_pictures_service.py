import pytest

from app.domain.pictures.exceptions import PictureLimitReached, PictureNotFound
from app.domain.pictures.service import PictureService
from app.settings import settings


@pytest.mark.asyncio
async def test_add_assigns_display_order_and_caps(fake_pictures):
    service = PictureService(repository=fake_pictures)
    for index in range(settings.max_profile_pictures):
        picture = await service.add(1, f"/objects/{index}.png")
        assert picture.display_order == index
    with pytest.raises(PictureLimitReached):
        await service.add(1, "/objects/extra.png")
    # another user is unaffected
    assert (await service.add(2, "/objects/other.png")).display_order == 0


@pytest.mark.asyncio
async def test_remove_only_own_picture(fake_pictures):
    repo = fake_pictures
    service = PictureService(repository=repo)
    picture = await service.add(1, "/objects/a.png")
    with pytest.raises(PictureNotFound):
        await service.remove(2, picture.id)
    await service.remove(1, picture.id)
    assert await service.list_for_user(1) == []
