from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Tuple


@dataclass(frozen=True)
class StepDefinition:
    id: str
    title: str
    description: str
    icon: str


@dataclass(frozen=True)
class StepHelp:
    title: str
    description: str
    tips: List[str] = field(default_factory=list)


PROBLEM_SCOPING = "problem-scoping"
CHALLENGE_TYPE = "challenge-type"
AUDIENCE_REGISTRATION = "audience-registration"
SUBMISSION_REQUIREMENTS = "submission-requirements"
PRIZE_CONFIGURATION = "prize-configuration"
TIMELINE_MILESTONES = "timeline-milestones"
EVALUATION_CRITERIA = "evaluation-criteria"
COMMUNICATIONS_MONITORING = "communications-monitoring"
REVIEW_LAUNCH = "review-launch"


# Navigation order and sidebar menu; the last entry is the terminal review step.
STEPS: Tuple[StepDefinition, ...] = (
    StepDefinition(PROBLEM_SCOPING, "Problem Scoping", "Define the core problem", "message-square"),
    StepDefinition(CHALLENGE_TYPE, "Challenge Type", "Select the best format", "target"),
    StepDefinition(AUDIENCE_REGISTRATION, "Audience & Registration", "Define participants", "users"),
    StepDefinition(SUBMISSION_REQUIREMENTS, "Submission Requirements", "Set submission guidelines", "file-text"),
    StepDefinition(PRIZE_CONFIGURATION, "Prize Configuration", "Configure rewards", "trophy"),
    StepDefinition(TIMELINE_MILESTONES, "Timeline & Milestones", "Set dates and duration", "calendar"),
    StepDefinition(EVALUATION_CRITERIA, "Evaluation Criteria", "Define judging criteria", "clipboard-check"),
    StepDefinition(COMMUNICATIONS_MONITORING, "Communications & Monitoring", "Plan promotion", "megaphone"),
    StepDefinition(REVIEW_LAUNCH, "Review & Launch", "Final review and launch", "eye"),
)


def step_index(step_id: str, steps: Tuple[StepDefinition, ...] = STEPS) -> int:
    for idx, step in enumerate(steps):
        if step.id == step_id:
            return idx
    raise KeyError(step_id)


STEP_HELP: Dict[str, StepHelp] = {
    PROBLEM_SCOPING: StepHelp(
        "Define Your Challenge Foundation",
        "Let's start by clearly understanding the problem you want to solve. This foundation will guide every aspect of your challenge.",
        [
            "Be specific about the problem you're trying to solve",
            "Provide context about why this matters now",
            "Think about the impact of solving this problem",
        ],
    ),
    CHALLENGE_TYPE: StepHelp(
        "Choose Your Challenge Format",
        "Based on your problem, I'll recommend the best challenge type from the proven formats.",
        [
            "Each type has different submission requirements",
            "Consider your timeline and resources",
            "Think about your audience's capabilities",
        ],
    ),
    AUDIENCE_REGISTRATION: StepHelp(
        "Define Your Participants",
        "Who should participate in your challenge? Let's configure the right audience and registration settings.",
        [
            "Consider both internal and external participants",
            "Think about team vs individual submissions",
            "Decide on approval requirements for quality control",
        ],
    ),
    SUBMISSION_REQUIREMENTS: StepHelp(
        "Set Clear Expectations",
        "What should participants submit? Clear requirements lead to better submissions.",
        [
            "Be specific about deliverable formats",
            "Provide clear guidelines and examples",
            "Consider what's realistic for your timeline",
        ],
    ),
    PRIZE_CONFIGURATION: StepHelp(
        "Design Your Rewards",
        "Motivate participants with meaningful rewards that align with your goals and budget.",
        [
            "Consider both monetary and recognition rewards",
            "Think about multiple prize tiers",
            "Align rewards with your expected outcomes",
        ],
    ),
    TIMELINE_MILESTONES: StepHelp(
        "Plan Your Schedule",
        "Set realistic timelines that give participants enough time while maintaining momentum.",
        [
            "Allow time for promotion before launch",
            "Consider participant availability",
            "Plan for evaluation and winner announcement",
        ],
    ),
    EVALUATION_CRITERIA: StepHelp(
        "Define Success Metrics",
        "How will you judge submissions? Clear criteria ensure fair and effective evaluation.",
        [
            "Align criteria with your problem statement",
            "Consider feasibility and impact",
            "Make criteria transparent to participants",
        ],
    ),
    COMMUNICATIONS_MONITORING: StepHelp(
        "Promote and Track",
        "Plan how you'll promote your challenge and monitor its progress throughout.",
        [
            "Use multiple channels for maximum reach",
            "Plan regular updates during the challenge",
            "Monitor engagement and adjust if needed",
        ],
    ),
    REVIEW_LAUNCH: StepHelp(
        "Final Review",
        "Review all your settings and launch your challenge with confidence.",
        [
            "Double-check all dates and requirements",
            "Ensure your team is ready to support participants",
            "Have a communication plan ready",
        ],
    ),
}


# Option catalogues shared by the panels and the review summary
CHALLENGE_TYPES: Dict[str, Dict[str, str]] = {
    "ideation": {"name": "The Brainstorm", "description": "Generate breakthrough ideas"},
    "theoretical": {"name": "The Design", "description": "Submit conceptual designs"},
    "rtp": {"name": "The Prototype", "description": "Submit working non-commercial prototypes"},
    "erfp": {"name": "The Collaborator", "description": "Attract collaborators via structured proposals"},
    "prodigy": {"name": "The Algorithm", "description": "Solve algorithmic problems with automated scoring"},
}

AUDIENCE_TYPES: Dict[str, str] = {
    "internal": "Internal Staff",
    "global": "Global Crowd",
    "partners": "Partner Network",
    "customers": "Customer Community",
}

PARTICIPATION_TYPES: Dict[str, str] = {
    "individual": "Individual Submissions",
    "team": "Team Submissions",
    "both": "Both Individual & Team",
}

SUBMISSION_TYPES: Dict[str, str] = {
    "document": "Written Document",
    "presentation": "Pitch Deck",
    "video": "Video Pitch",
    "prototype": "Working Prototype",
    "design": "Visual Design",
    "concept": "Concept Only",
}

PRIZE_TYPES: Dict[str, str] = {
    "monetary": "Monetary Prizes",
    "recognition": "Recognition Only",
    "mixed": "Mixed Rewards",
    "none": "No Prizes",
}

SCORING_MODELS: Dict[str, str] = {
    "weighted": "Weighted Scoring",
    "checklist": "Checklist Evaluation",
    "feedback": "Open Feedback",
}

PROMOTION_CHANNELS: Dict[str, str] = {
    "email": "Email Campaign",
    "social": "Social Media",
    "intranet": "Company Intranet",
    "website": "Website Banner",
}

MONITORING_METRICS: Dict[str, str] = {
    "participation": "Participation Rate",
    "engagement": "Engagement Metrics",
    "quality": "Submission Quality",
    "feedback": "Participant Feedback",
}

REPORTING_FREQUENCIES: Tuple[str, ...] = ("daily", "weekly", "biweekly", "monthly")
