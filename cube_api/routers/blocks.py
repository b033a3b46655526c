from fastapi import APIRouter, Depends
from cube_api.schemas.api_schemas import BlockTemplateResponse
from cube_api.dependencies import get_catalog
from cube_api.domain.catalog import BlockCatalog
from typing import Dict, List

router = APIRouter()

@router.get("/blocks", response_model=List[BlockTemplateResponse])
async def list_blocks(catalog: BlockCatalog = Depends(get_catalog)):
    """
    List every block template in the library.
    """
    return [BlockTemplateResponse.from_entity(template) for template in catalog]

@router.get("/blocks/categories", response_model=Dict[str, List[BlockTemplateResponse]])
async def list_blocks_by_category(catalog: BlockCatalog = Depends(get_catalog)):
    """
    Block templates grouped by library category.
    """
    return {
        category: [BlockTemplateResponse.from_entity(template) for template in templates]
        for category, templates in catalog.by_category().items()
    }

@router.get("/blocks/{template_id}", response_model=BlockTemplateResponse)
async def get_block(template_id: str, catalog: BlockCatalog = Depends(get_catalog)):
    """
    Get a single block template.
    """
    return BlockTemplateResponse.from_entity(catalog.get(template_id))
