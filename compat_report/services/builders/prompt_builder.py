import os
from typing import Optional

from jinja2 import Environment, FileSystemLoader

from compat_report.models.report import ReportRequest
from compat_report.services.base.prompt_builder import PromptBuilder

# Setup Jinja2 environment for templates
template_dir = os.path.join(os.path.dirname(os.path.dirname(os.path.dirname(__file__))), 'templates')
env = Environment(loader=FileSystemLoader(template_dir), keep_trailing_newline=True)

UNKNOWN = "미상"

TOPIC_FRAMING = {
    "compatibility_basic": "전반적인 궁합과 관계의 기본 흐름",
    "red_line": "서로 절대 넘지 말아야 할 경계선(레드 라인)과 갈등 촉발 지점",
    "lucky_color": "두 사람의 관계 무드를 살리는 행운 컬러와 분위기 연출",
}


def _or_unknown(value: Optional[str]) -> str:
    return value if value else UNKNOWN


class CompatPromptBuilder(PromptBuilder):
    """Renders the system instruction and the two-person payload for a report"""

    def build_system(self) -> str:
        return env.get_template("system_prompt.j2").render()

    def build(self, request: ReportRequest) -> str:
        topic = request.resolved_topic
        persons = [
            {
                "label": "남",
                "birth": _or_unknown(request.man_birth),
                "time": _or_unknown(request.man_time),
                "mbti": _or_unknown(request.man_mbti),
                "blood": _or_unknown(request.man_blood),
            },
            {
                "label": "여",
                "birth": _or_unknown(request.woman_birth),
                "time": _or_unknown(request.woman_time),
                "mbti": _or_unknown(request.woman_mbti),
                "blood": _or_unknown(request.woman_blood),
            },
        ]
        return env.get_template("report_prompt.j2").render(
            topic=topic,
            framing=TOPIC_FRAMING[topic],
            persons=persons,
        )
