"""content.catalog

Static event tables.

- RANDOM_EVENTS: ambient office events, each at most once per day.
- SCRIPTED_EVENTS: story beats (fixed day and/or condition), each at most once per game.
- Relationship crisis: the one-off prompt shown when relationship drops below the threshold.
"""

from __future__ import annotations

from typing import Optional, Tuple

from core.state import Branch, StoryFlag

from .schemas import EventCondition, EventDefinition, EventOutcome, FlagRule, validate_catalog

O = EventOutcome

RANDOM_EVENTS: Tuple[EventDefinition, ...] = (
    EventDefinition(
        id="colleague_help",
        title="同事求助",
        description="同事让你帮忙整理文件",
        a=O("帮一把", mood=-2, relationship=+2),
        b=O("婉拒", mood=+1, relationship=-3),
    ),
    EventDefinition(
        id="takeout_coupon",
        title="外卖红包",
        description="抢到大额券，加奶茶补充快乐",
        a=O("点！", mood=+3, money=-25),
        b=O("忍住", mood=-1),
    ),
    EventDefinition(
        id="urgent_request",
        title="加急需求",
        description="主管突然来个加急任务",
        a=O("收到", mood=-3, perf=+1),
        b=O("明天再说", mood=+2, perf=-1, relationship=-1),
    ),
    EventDefinition(
        id="new_gacha",
        title="上新卡池了",
        description="花点钱快乐一下？小心上头!",
        a=O("十连！", mood=+3, money=-100),
        b=O("克制", mood=+1),
    ),
    EventDefinition(
        id="colleague_birthday",
        title="同事生日",
        description="大家AA蛋糕",
        a=O("参与AA", mood=+1, money=-30, relationship=+3),
        b=O("口头祝福", mood=+3, relationship=-3),
        social=True,
    ),
    EventDefinition(
        id="team_building",
        title="部门团建",
        description="K歌+自助",
        a=O("报名", mood=+1, relationship=+2),
        b=O("不去", mood=+2, relationship=-3),
        social=True,
    ),
    EventDefinition(
        id="bathroom_smoking",
        title="厕所事件",
        description="总是有人偷偷在厕所抽烟",
        a=O("默默忍受", mood=-2),
        b=O("大群开喷", mood=+5, relationship=+1),
    ),
    EventDefinition(
        id="daily_report",
        title="日报没写",
        description="摸鱼摸得忘乎所以",
        a=O("加班补", mood=-2),
        b=O("偷抄同事的", mood=+2, perf=-1),
    ),
    EventDefinition(
        id="lunch_choice",
        title="吃饭犹豫",
        description="外卖还是食堂?",
        a=O("豪华外卖", mood=+3, money=-25),
        b=O("公司食堂", mood=-1),
    ),
    EventDefinition(
        id="overtime_question",
        title="今晚加班吗",
        description="老板最近似乎很焦虑",
        a=O("加班", mood=-2, perf=+2),
        b=O("加个屁", mood=+3, perf=-3, relationship=+1),
    ),
    EventDefinition(
        id="lottery_ticket",
        title="买彩票吗",
        description="搏一把单车变摩托",
        a=O("买！", money=-10, special="lottery"),
        b=O("算了算了", mood=-1),
    ),
)


def _flag(flag: StoryFlag, when: Optional[Branch] = None) -> FlagRule:
    return FlagRule(flag=flag, when=when)


SCRIPTED_EVENTS: Tuple[EventDefinition, ...] = (
    # week 1
    EventDefinition(
        id="DAY1_MENTOR_INTRO",
        day=1,
        title="前辈的关照",
        description="直属领导林雨萱主动过来关心你的适应情况，还给你带了杯咖啡",
        a=O("感谢并请教工作", mood=+3, perf=+1, relationship=+3),
        b=O("礼貌感谢就好", mood=+1, relationship=+1),
        character="mentor",
        flags=(_flag(StoryFlag.MENTOR_CLOSENESS, Branch.A),),
    ),
    EventDefinition(
        id="DAY2_BLAME_GAME",
        day=2,
        title="背锅侠的诞生",
        description="王志强把他负责的bug说成是\"新人不熟悉导致的\"，所有人都看向了你",
        a=O("据理力争", mood=-2, relationship=-1),
        b=O("默默承受", mood=-5, perf=-1, relationship=+2),
        character="annoying",
        flags=(_flag(StoryFlag.ANNOYING_FIRST_IMPRESSION),),
    ),
    EventDefinition(
        id="DAY3_CROSS_TEAM",
        day=3,
        title="新的合作",
        description="需要和其他组的张小雅对接项目，她看起来很专业但有点严肃",
        a=O("主动沟通项目细节", mood=+1, perf=+2, relationship=+2),
        b=O("按部就班完成对接", perf=+1),
        character="partner",
        flags=(_flag(StoryFlag.PARTNER_IMPRESSION),),
    ),
    EventDefinition(
        id="DAY4_MENTOR_GUIDANCE",
        day=4,
        title="深度指导",
        description="林雨萱注意到你工作中的一些问题，决定单独指导你",
        a=O("虚心学习", mood=+2, perf=+3, relationship=+3),
        b=O("觉得有压力", mood=-1, perf=+2, relationship=+1),
        condition=EventCondition.flag_equals(StoryFlag.MENTOR_CLOSENESS, Branch.A),
        character="mentor",
    ),
    EventDefinition(
        id="DAY4_XIAOYA_LUNCH",
        day=4,
        title="午餐邀请",
        description="张小雅主动邀请你一起去公司楼下的小餐厅吃午饭，说想聊聊项目的想法",
        a=O("欣然接受", mood=+2, money=-20, relationship=+3),
        b=O("说自己带了饭", relationship=-1),
        character="partner",
        flags=(_flag(StoryFlag.XIAOYA_LUNCH),),
        social=True,
    ),
    EventDefinition(
        id="DAY5_WEEKEND_WORK",
        day=5,
        title="周末的选择",
        description="项目进度紧张，林雨萱提议周末来公司加班赶进度",
        a=O("主动参与", mood=-3, perf=+3, relationship=+3),
        b=O("推说有事", mood=+2, perf=-1, relationship=-2),
        character="mentor",
        flags=(_flag(StoryFlag.WEEKEND_WORK),),
    ),
    # week 2
    EventDefinition(
        id="DAY8_PARTNER_RELIABLE",
        day=8,
        title="意外的帮助",
        description="张小雅发现了项目中的一个重大风险，及时提醒了你，避免了大问题",
        a=O("真诚感谢", mood=+3, perf=+2, relationship=+4),
        b=O("觉得理所当然", mood=+1, perf=+2, relationship=-1),
        character="partner",
        flags=(_flag(StoryFlag.PARTNER_TRUST),),
    ),
    EventDefinition(
        id="DAY9_XIAOYA_SKILL",
        day=9,
        title="技能分享",
        description="张小雅注意到你在某个技术点上有困惑，主动分享了她的经验和小技巧",
        a=O("认真学习并请教", mood=+1, perf=+2, relationship=+3),
        b=O("客气感谢", mood=+1, perf=+1, relationship=+1),
        character="partner",
    ),
    EventDefinition(
        id="DAY9_ANNOYING_HELP",
        day=9,
        title="意想不到的援手",
        description="王志强看到你被客户刁难，主动站出来帮你解围，虽然方式有点粗暴",
        a=O("感谢他的帮助", mood=+2, relationship=+3),
        b=O("觉得他别有用心", mood=-1, relationship=-1),
        character="annoying",
        flags=(_flag(StoryFlag.ANNOYING_COMPLEX),),
    ),
    EventDefinition(
        id="DAY9_TEAM_CRISIS",
        day=9,
        title="项目危机",
        description="项目出现重大问题，需要有人承担责任，王志强第一时间把矛头指向你",
        a=O("据理力争证明清白", mood=-3, relationship=-2),
        b=O("主动承担责任", mood=-5, perf=-2, relationship=+1),
        character="annoying",
        flags=(_flag(StoryFlag.CRISIS_RESPONSE),),
    ),
    EventDefinition(
        id="DAY10_XIAOYA_SUPPORT",
        day=10,
        title="默默支持",
        description="你在会议上提出的方案被质疑，张小雅在会后私下对你说\"我觉得你的想法很有道理\"",
        a=O("感到被理解", mood=+3, relationship=+4),
        b=O("觉得她只是安慰", mood=+1, relationship=+1),
        character="partner",
        flags=(_flag(StoryFlag.XIAOYA_SUPPORT),),
    ),
    EventDefinition(
        id="DAY10_MENTOR_PERSONAL",
        day=10,
        title="下班后的谈话",
        description="林雨萱下班后邀请你去咖啡厅聊天，她看起来有心事",
        a=O("关心询问", mood=+2, money=-15, relationship=+5),
        b=O("只是倾听", money=-15, relationship=+2),
        condition=EventCondition.flag_equals(StoryFlag.WEEKEND_WORK, Branch.A),
        character="mentor",
        flags=(_flag(StoryFlag.MENTOR_PERSONAL),),
    ),
    EventDefinition(
        id="DAY11_XIAOYA_CRISIS_HELP",
        day=11,
        title="危机时刻的援助",
        description="项目出问题时，张小雅主动加班帮你分析数据，找出了问题的根源",
        a=O("深深感谢她的帮助", mood=+2, perf=+2, relationship=+5),
        b=O("认为这是团队合作", mood=+1, perf=+2, relationship=+2),
        character="partner",
    ),
    EventDefinition(
        id="DAY12_XIAOYA_PERSONAL",
        day=12,
        title="私人话题",
        description="张小雅难得和你聊起工作以外的话题，分享了她对职场生活的一些看法",
        a=O("分享自己的想法", mood=+2, relationship=+3),
        b=O("主要是倾听", mood=+1, relationship=+2),
        condition=EventCondition.flag_equals(StoryFlag.XIAOYA_SUPPORT, Branch.A),
        character="partner",
        flags=(_flag(StoryFlag.XIAOYA_FRIENDSHIP),),
    ),
    EventDefinition(
        id="DAY12_MENTOR_HINT",
        day=12,
        title="不寻常的话语",
        description="林雨萱今天格外关心你的工作能力，还问你\"如果我不在了，你能独当一面吗？\"",
        a=O("敏感地察觉异常", mood=-2, relationship=+3),
        b=O("以为是正常关心", mood=+1, relationship=+1),
        condition=EventCondition.flag_equals(StoryFlag.MENTOR_PERSONAL, Branch.A),
        character="mentor",
        flags=(_flag(StoryFlag.MENTOR_LEAVING_HINT),),
    ),
    # any day, once relationship is high
    EventDefinition(
        id="RELATIONSHIP_80_BONUS",
        title="同事们的认可",
        description="大家都觉得你很靠谱，主动分享了一些工作小技巧",
        a=O("表示感谢", mood=+5, perf=+3, relationship=+2),
        b=O("低调接受", mood=+3, perf=+2),
        condition=EventCondition.relationship_at_least(80),
        character="general",
    ),
)


RELATIONSHIP_CRISIS_ID = "RELATIONSHIP_CRISIS"
RELATIONSHIP_CRISIS_TITLE = "匿名举报"
RELATIONSHIP_CRISIS_DESCRIPTION = "有人偷偷举报你摸鱼，HR找你谈话了..."
RELATIONSHIP_CRISIS_ACK = "知道了"
RELATIONSHIP_CRISIS_NOTICE = "绩效-5，要注意同事关系！"


validate_catalog(RANDOM_EVENTS)
validate_catalog(SCRIPTED_EVENTS)
