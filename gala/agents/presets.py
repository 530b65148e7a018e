"""Preset agent configurations for the creative-workflow agents.

Tool implementations here return demo payloads; hosts wire real
integrations (CMS, social APIs, email service) by replacing ``execute``.
"""

from datetime import datetime, timedelta, timezone
from typing import Literal, Optional

from pydantic import BaseModel, Field

from gala.agents.agent import AgentConfig
from gala.tools.registry import ToolDefinition

PRESET_MODEL = "claude-3-5-sonnet-20241022"


# ============================================================================
# Content creator
# ============================================================================

class GenerateCaptionParams(BaseModel):
    image_analysis: str
    user_story: Optional[str] = None
    platform: Literal["instagram", "twitter", "facebook"] = "instagram"
    tone: Literal["professional", "casual", "inspirational"] = "casual"


class GenerateHashtagsParams(BaseModel):
    content: str
    count: int = Field(default=15, ge=5, le=30)
    category: Optional[str] = None


def _generate_caption(params: GenerateCaptionParams) -> dict:
    return {"caption": f"Generated caption based on: {params.image_analysis}"}


def _generate_hashtags(params: GenerateHashtagsParams) -> dict:
    hashtags = ["#tattoo", "#tattooartist", "#inked", "#tattooart", "#customtattoo"]
    return {"hashtags": hashtags[: params.count]}


CONTENT_CREATOR_PROMPT = """You are a professional social media content creator specializing in visual arts and tattoo culture. Your role is to:
- Write engaging, authentic captions that tell stories
- Generate relevant hashtags (mix of popular and niche)
- Adapt tone for different platforms (Instagram, Twitter, etc.)
- Include calls-to-action when appropriate
- Maintain brand voice

Always create content that feels personal and genuine, not robotic or overly promotional."""


# ============================================================================
# Social media manager
# ============================================================================

class PostContent(BaseModel):
    images: list[str]
    caption: str
    hashtags: list[str]


class PostToPlatformsParams(BaseModel):
    platforms: list[Literal["instagram", "buffer", "twitter"]]
    content: PostContent
    schedule: Optional[datetime] = None


class OptimalPostingTimeParams(BaseModel):
    platform: str
    timezone: str = "UTC"


def _post_to_platforms(params: PostToPlatformsParams) -> dict:
    return {
        "success": True,
        "posted": params.platforms,
        "post_ids": [f"{platform}_12345" for platform in params.platforms],
    }


def _get_optimal_posting_time(params: OptimalPostingTimeParams) -> dict:
    suggested = datetime.now(timezone.utc) + timedelta(hours=2)
    return {
        "suggested_time": suggested.isoformat(),
        "reason": "Based on your audience activity patterns",
    }


SOCIAL_MEDIA_MANAGER_PROMPT = """You are a social media manager responsible for publishing content across multiple platforms. Your role is to:
- Coordinate posting across Instagram, Buffer, and other platforms
- Optimize posting times
- Ensure consistent branding
- Track post performance
- Suggest improvements

You work closely with content creators to ensure posts are published correctly and effectively."""


# ============================================================================
# Portfolio manager
# ============================================================================

class AddToPortfolioParams(BaseModel):
    images: list[str]
    title: str
    description: str
    category: Optional[str] = None
    tags: list[str] = Field(default_factory=list)


class ProjectDescriptionParams(BaseModel):
    image_analysis: str
    work_type: str
    client_info: Optional[str] = None


def _add_to_portfolio(params: AddToPortfolioParams) -> dict:
    return {
        "success": True,
        "portfolio_item_id": "portfolio_12345",
        "url": "https://portfolio.example.com/work/12345",
    }


def _generate_project_description(params: ProjectDescriptionParams) -> dict:
    return {"description": f"Professional {params.work_type} description based on the analysis"}


PORTFOLIO_MANAGER_PROMPT = """You are a portfolio manager responsible for maintaining a professional portfolio website. Your role is to:
- Organize and categorize work
- Write compelling project descriptions
- Optimize images for web
- Maintain consistent presentation
- Suggest portfolio improvements

You ensure the portfolio always showcases the best work in the most professional manner."""


# ============================================================================
# Email marketer
# ============================================================================

class CallToAction(BaseModel):
    text: str
    url: str


class CreateCampaignParams(BaseModel):
    subject: str
    content: str
    images: list[str] = Field(default_factory=list)
    cta: Optional[CallToAction] = None


class EmailContentParams(BaseModel):
    purpose: str
    portfolio_updates: Optional[str] = None
    tone: Literal["professional", "friendly", "promotional"]


def _create_campaign(params: CreateCampaignParams) -> dict:
    return {
        "success": True,
        "campaign_id": "campaign_12345",
        "preview_url": "https://email.example.com/preview/12345",
    }


def _generate_email_content(params: EmailContentParams) -> dict:
    return {
        "subject": "Portfolio Update - New Work Available",
        "body": "Email body content",
        "cta": {"text": "View Portfolio", "url": "https://portfolio.example.com"},
    }


EMAIL_MARKETER_PROMPT = """You are an email marketing specialist. Your role is to:
- Craft compelling email campaigns
- Write attention-grabbing subject lines
- Design email layouts
- Optimize for deliverability and engagement
- Include effective calls-to-action
- Segment and personalize content

You create emails that engage subscribers and drive action while maintaining professional quality."""


VISION_ANALYZER_PROMPT = """You are an expert image analyst. Your role is to analyze images and provide detailed descriptions including:
- Subject matter and composition
- Colors and visual style
- Mood and emotion conveyed
- Technical quality
- Suggested use cases
- Recommendations for captions and tags

Be specific and detailed in your analysis to help create compelling social media content."""


def vision_analyzer_config() -> AgentConfig:
    return AgentConfig(
        id="vision_analyzer",
        name="Vision Analyzer",
        description="Analyzes images to understand content, style, and context",
        system_prompt=VISION_ANALYZER_PROMPT,
        model=PRESET_MODEL,
        temperature=0.7,
    )


def content_creator_config() -> AgentConfig:
    return AgentConfig(
        id="content_creator",
        name="Content Creator",
        description="Creates engaging captions, hashtags, and social media content",
        system_prompt=CONTENT_CREATOR_PROMPT,
        model=PRESET_MODEL,
        temperature=0.8,
        tools=[
            ToolDefinition(
                name="generate_caption",
                description="Generate an engaging caption for social media",
                parameters=GenerateCaptionParams,
                execute=_generate_caption,
            ),
            ToolDefinition(
                name="generate_hashtags",
                description="Generate relevant hashtags",
                parameters=GenerateHashtagsParams,
                execute=_generate_hashtags,
            ),
        ],
    )


def social_media_manager_config() -> AgentConfig:
    return AgentConfig(
        id="social_media_manager",
        name="Social Media Manager",
        description="Manages posting to social media platforms",
        system_prompt=SOCIAL_MEDIA_MANAGER_PROMPT,
        model=PRESET_MODEL,
        temperature=0.5,
        tools=[
            ToolDefinition(
                name="post_to_platforms",
                description="Post content to selected social media platforms",
                parameters=PostToPlatformsParams,
                execute=_post_to_platforms,
            ),
            ToolDefinition(
                name="get_optimal_posting_time",
                description="Get the optimal time to post based on audience engagement",
                parameters=OptimalPostingTimeParams,
                execute=_get_optimal_posting_time,
            ),
        ],
    )


def portfolio_manager_config() -> AgentConfig:
    return AgentConfig(
        id="portfolio_manager",
        name="Portfolio Manager",
        description="Manages portfolio website updates and organization",
        system_prompt=PORTFOLIO_MANAGER_PROMPT,
        model=PRESET_MODEL,
        temperature=0.6,
        tools=[
            ToolDefinition(
                name="add_to_portfolio",
                description="Add new work to the portfolio",
                parameters=AddToPortfolioParams,
                execute=_add_to_portfolio,
            ),
            ToolDefinition(
                name="generate_project_description",
                description="Generate a professional description for portfolio work",
                parameters=ProjectDescriptionParams,
                execute=_generate_project_description,
            ),
        ],
    )


def email_marketer_config() -> AgentConfig:
    return AgentConfig(
        id="email_marketer",
        name="Email Marketer",
        description="Creates and manages email campaigns",
        system_prompt=EMAIL_MARKETER_PROMPT,
        model=PRESET_MODEL,
        temperature=0.7,
        tools=[
            ToolDefinition(
                name="create_campaign",
                description="Create an email campaign",
                parameters=CreateCampaignParams,
                execute=_create_campaign,
            ),
            ToolDefinition(
                name="generate_email_content",
                description="Generate email content for a campaign",
                parameters=EmailContentParams,
                execute=_generate_email_content,
            ),
        ],
    )


def default_agent_configs() -> list[AgentConfig]:
    """Fresh configs for every preset agent, in registration order."""
    return [
        vision_analyzer_config(),
        content_creator_config(),
        social_media_manager_config(),
        portfolio_manager_config(),
        email_marketer_config(),
    ]
